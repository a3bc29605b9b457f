"""Unit tests for the core policy set (migration 0002)."""

import uuid

import pytest
from services.marketplace_service.models import UserRole
from services.marketplace_service.policies import (
    CORE_RLS_TABLES,
    Caller,
    DenialReason,
    Operation,
    PolicyContext,
    evaluate,
)


class FakeLookups:
    """In-memory stand-in for ``MarketplaceLookups``."""

    def __init__(self, purchases=()):
        self.purchases = set(purchases)

    async def has_ordered_product(self, user_id, product_id):
        return (user_id, product_id) in self.purchases


def _ctx(user_id=None, role=UserRole.CUSTOMER, purchases=()):
    return PolicyContext(
        caller=Caller(user_id or uuid.uuid4(), role),
        lookups=FakeLookups(purchases),
    )


@pytest.mark.unit
def test_core_enables_rls_on_first_release_tables(core_registry):
    assert set(CORE_RLS_TABLES) == core_registry.rls_tables
    for table in ("categories", "inventory", "order_items", "coupons"):
        assert not core_registry.is_rls_enabled(table)


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("table", ["products", "payments", "notifications"])
async def test_tables_with_rls_but_no_policy_are_locked(core_registry, table):
    ctx = _ctx(role=UserRole.ADMIN)
    for operation in Operation:
        decision = await evaluate(core_registry, ctx, table, operation, {}, {})
        assert decision.reason == DenialReason.MISSING_POLICY


@pytest.mark.asyncio
@pytest.mark.unit
async def test_reviews_are_visible_to_everyone(core_registry):
    decision = await evaluate(
        core_registry,
        _ctx(),
        "reviews",
        Operation.SELECT,
        {"user_id": uuid.uuid4(), "rating": 4},
    )
    assert decision.policy == "Users can view all reviews"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_review_insert_requires_purchase(core_registry):
    product_id = uuid.uuid4()
    buyer = _ctx()
    buyer.lookups.purchases.add((buyer.caller.user_id, product_id))
    window_shopper = _ctx()

    def review(ctx, rating=5):
        return {"user_id": ctx.caller.user_id, "product_id": product_id, "rating": rating}

    assert await evaluate(
        core_registry, buyer, "reviews", Operation.INSERT, review(buyer)
    )
    denied = await evaluate(
        core_registry,
        window_shopper,
        "reviews",
        Operation.INSERT,
        review(window_shopper),
    )
    assert denied.reason == DenialReason.CHECK_FAILED


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("rating", [0, 6, None])
async def test_review_insert_rejects_out_of_range_rating(core_registry, rating):
    product_id = uuid.uuid4()
    ctx = _ctx()
    ctx.lookups.purchases.add((ctx.caller.user_id, product_id))
    row = {"user_id": ctx.caller.user_id, "product_id": product_id, "rating": rating}

    decision = await evaluate(core_registry, ctx, "reviews", Operation.INSERT, row)
    assert decision.reason == DenialReason.CHECK_FAILED


@pytest.mark.asyncio
@pytest.mark.unit
async def test_review_insert_for_someone_else_is_denied(core_registry):
    product_id = uuid.uuid4()
    ctx = _ctx()
    ctx.lookups.purchases.add((ctx.caller.user_id, product_id))
    row = {"user_id": uuid.uuid4(), "product_id": product_id, "rating": 5}

    decision = await evaluate(core_registry, ctx, "reviews", Operation.INSERT, row)
    assert not decision


@pytest.mark.asyncio
@pytest.mark.unit
async def test_review_update_keeps_rating_in_bounds(core_registry):
    ctx = _ctx()
    old = {"user_id": ctx.caller.user_id, "rating": 3}

    assert await evaluate(
        core_registry, ctx, "reviews", Operation.UPDATE, old, {**old, "rating": 4}
    )
    decision = await evaluate(
        core_registry, ctx, "reviews", Operation.UPDATE, old, {**old, "rating": 9}
    )
    assert decision.reason == DenialReason.CHECK_FAILED


@pytest.mark.asyncio
@pytest.mark.unit
async def test_users_can_update_only_their_own_profile(core_registry):
    ctx = _ctx()
    me = {"id": ctx.caller.user_id, "first_name": "Ann"}
    other = {"id": uuid.uuid4(), "first_name": "Bo"}

    assert await evaluate(
        core_registry, ctx, "users", Operation.UPDATE, me, {**me, "first_name": "A"}
    )
    assert not await evaluate(
        core_registry, ctx, "users", Operation.UPDATE, other, other
    )
    # Core has no users SELECT policy
    decision = await evaluate(core_registry, ctx, "users", Operation.SELECT, me)
    assert decision.reason == DenialReason.MISSING_POLICY


@pytest.mark.asyncio
@pytest.mark.unit
async def test_merchant_store_is_owner_only(core_registry):
    ctx = _ctx()
    store = {"owner_id": ctx.caller.user_id}
    foreign = {"owner_id": uuid.uuid4()}

    for operation in (Operation.SELECT, Operation.DELETE):
        assert await evaluate(core_registry, ctx, "merchants", operation, store)
        assert not await evaluate(core_registry, ctx, "merchants", operation, foreign)

    # No INSERT policy: stores cannot be opened under the core set
    decision = await evaluate(core_registry, ctx, "merchants", Operation.INSERT, store)
    assert decision.reason == DenialReason.MISSING_POLICY


@pytest.mark.asyncio
@pytest.mark.unit
async def test_orders_are_read_only_for_their_customer(core_registry):
    ctx = _ctx()
    order = {"user_id": ctx.caller.user_id, "status": "pending"}

    assert await evaluate(core_registry, ctx, "orders", Operation.SELECT, order)
    for operation in (Operation.INSERT, Operation.UPDATE, Operation.DELETE):
        decision = await evaluate(core_registry, ctx, "orders", operation, order, order)
        assert decision.reason == DenialReason.MISSING_POLICY


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("table", ["wishlist", "addresses"])
async def test_personal_tables_are_owner_only(core_registry, table):
    ctx = _ctx()
    mine = {"user_id": ctx.caller.user_id}
    theirs = {"user_id": uuid.uuid4()}

    for operation in (Operation.SELECT, Operation.INSERT, Operation.DELETE):
        assert await evaluate(core_registry, ctx, table, operation, mine)
        assert not await evaluate(core_registry, ctx, table, operation, theirs)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_core_gives_admins_no_extra_rights(core_registry):
    ctx = _ctx(role=UserRole.ADMIN)
    decision = await evaluate(
        core_registry, ctx, "addresses", Operation.SELECT, {"user_id": uuid.uuid4()}
    )
    assert decision.reason == DenialReason.USING_FAILED
