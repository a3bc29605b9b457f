"""Engagement router: product reviews and wishlists."""

import uuid

from fastapi import APIRouter, Depends, status
from services.marketplace_service.dependencies import get_repository
from services.marketplace_service.models import Review, Wishlist
from services.marketplace_service.schemas import (
    ReviewCreate,
    ReviewResponse,
    ReviewUpdate,
    WishlistCreate,
    WishlistResponse,
)
from services.marketplace_service.services.repository import AuthorizedRepository

router = APIRouter(tags=["engagement"])


# ============================================================================
# REVIEWS
# ============================================================================


@router.get("/products/{product_id}/reviews", response_model=list[ReviewResponse])
async def list_product_reviews(
    product_id: uuid.UUID,
    repo: AuthorizedRepository = Depends(get_repository),
):
    return await repo.list(
        Review, Review.product_id == product_id, order_by=Review.created_at.desc()
    )


@router.post("/reviews", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def write_review(
    payload: ReviewCreate,
    repo: AuthorizedRepository = Depends(get_repository),
):
    """Review a product; only allowed once the caller has ordered it."""
    review = Review(user_id=repo.caller.user_id, **payload.model_dump())
    return await repo.insert(review)


@router.patch("/reviews/{review_id}", response_model=ReviewResponse)
async def edit_review(
    review_id: uuid.UUID,
    payload: ReviewUpdate,
    repo: AuthorizedRepository = Depends(get_repository),
):
    return await repo.update(Review, review_id, payload.model_dump(exclude_unset=True))


@router.delete("/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(
    review_id: uuid.UUID,
    repo: AuthorizedRepository = Depends(get_repository),
):
    await repo.delete(Review, review_id)


# ============================================================================
# WISHLIST
# ============================================================================


@router.get("/wishlist", response_model=list[WishlistResponse])
async def list_wishlist(repo: AuthorizedRepository = Depends(get_repository)):
    return await repo.list(Wishlist, order_by=Wishlist.created_at.desc())


@router.post(
    "/wishlist", response_model=WishlistResponse, status_code=status.HTTP_201_CREATED
)
async def add_to_wishlist(
    payload: WishlistCreate,
    repo: AuthorizedRepository = Depends(get_repository),
):
    return await repo.insert(
        Wishlist(user_id=repo.caller.user_id, product_id=payload.product_id)
    )


@router.delete("/wishlist/{wishlist_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_from_wishlist(
    wishlist_id: uuid.UUID,
    repo: AuthorizedRepository = Depends(get_repository),
):
    await repo.delete(Wishlist, wishlist_id)
