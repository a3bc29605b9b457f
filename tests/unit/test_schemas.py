"""Unit tests for request validation and response shaping."""

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest
from libs.common.datetime_utils import utc_now
from pydantic import ValidationError
from services.marketplace_service.schemas import (
    CouponCreate,
    CouponResponse,
    OrderCreate,
    ReviewCreate,
    UserCreate,
)


@pytest.mark.unit
@pytest.mark.parametrize("rating", [0, 6])
def test_review_rating_must_be_one_to_five(rating):
    with pytest.raises(ValidationError):
        ReviewCreate(product_id=uuid.uuid4(), rating=rating)


@pytest.mark.unit
def test_coupon_discount_is_a_percentage():
    with pytest.raises(ValidationError):
        CouponCreate(code="HALF", discount_percentage=Decimal("150"))


@pytest.mark.unit
def test_signup_cannot_request_admin_role():
    with pytest.raises(ValidationError):
        UserCreate(
            first_name="A",
            last_name="B",
            email="a@test.com",
            password="long-enough",
            role="admin",
        )


@pytest.mark.unit
def test_order_total_is_sum_of_items():
    order = OrderCreate(
        merchant_id=uuid.uuid4(),
        items=[
            {"product_id": uuid.uuid4(), "quantity": 2, "price": "10.50"},
            {"product_id": uuid.uuid4(), "quantity": 1, "price": "4.00"},
        ],
    )
    assert order.total_price == Decimal("25.00")


@pytest.mark.unit
def test_order_needs_items():
    with pytest.raises(ValidationError):
        OrderCreate(merchant_id=uuid.uuid4(), items=[])


@pytest.mark.unit
def test_coupon_response_reports_expiry():
    base = {
        "id": uuid.uuid4(),
        "code": "WOOL10",
        "discount_percentage": Decimal("10"),
        "created_at": utc_now(),
    }
    expired = CouponResponse(**base, expires_at=utc_now() - timedelta(days=1))
    active = CouponResponse(**base, expires_at=utc_now() + timedelta(days=1))
    open_ended = CouponResponse(**base, expires_at=None)

    assert expired.is_expired
    assert not active.is_expired
    assert not open_ended.is_expired
