"""Building blocks for policy predicates and their SQL scopes."""

from services.marketplace_service.policies.engine import (
    Caller,
    PolicyContext,
    Predicate,
    Row,
    passes,
)
from sqlalchemy import false, true


def always(ctx: PolicyContext, row: Row) -> bool:
    return True


def caller_is_admin(ctx: PolicyContext, row: Row) -> bool:
    return ctx.caller.is_admin


def owned_by(column: str) -> Predicate:
    """``row[column] = auth.uid()``; a NULL owner matches nobody."""

    def predicate(ctx: PolicyContext, row: Row) -> bool:
        owner = row.get(column)
        return owner is not None and owner == ctx.caller.user_id

    predicate.__name__ = f"{column}_is_caller"
    return predicate


def rating_in_bounds(ctx: PolicyContext, row: Row) -> bool:
    rating = row.get("rating")
    return rating is not None and 1 <= rating <= 5


def all_of(*predicates: Predicate) -> Predicate:
    """AND of predicates, short-circuiting before any lookup that isn't needed."""

    async def predicate(ctx: PolicyContext, row: Row) -> bool:
        for part in predicates:
            if not await passes(part, ctx, row):
                return False
        return True

    return predicate


# ---------------------------------------------------------------------------
# SQL scopes (list-query pushdown)
# ---------------------------------------------------------------------------


def everyone(caller: Caller):
    return true()


def admins_only(caller: Caller):
    return true() if caller.is_admin else false()


def owner_scope(column):
    """Scope matching ``column == caller.user_id`` for a mapped column."""

    def scope(caller: Caller):
        return column == caller.user_id

    return scope
