"""Data access gated by the row-level policy engine.

Every read and write goes through ``AuthorizedRepository`` so that each
(table, operation) decision is made in one place. Denials are raised before
anything is flushed; constraint violations roll the session back.
"""

import uuid
from typing import Any, Optional, TypeVar

from fastapi import HTTPException, status
from libs.common.logging import get_logger
from services.marketplace_service.policies import (
    Caller,
    Decision,
    Operation,
    PolicyContext,
    PolicyDeniedError,
    PolicyRegistry,
    authorize,
    evaluate,
    get_policy_registry,
)
from services.marketplace_service.services.lookups import MarketplaceLookups
from sqlalchemy import inspect as sa_inspect
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

ModelT = TypeVar("ModelT")


class ConstraintViolationError(HTTPException):
    """A write broke a CHECK, UNIQUE, NOT NULL or FOREIGN KEY constraint."""

    def __init__(self, table: str, message: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Constraint violation on {table}: {message}",
        )
        self.table = table


def row_snapshot(instance: Any) -> dict:
    """Column values of a mapped instance, keyed by attribute name."""
    mapper = sa_inspect(instance).mapper
    return {attr.key: getattr(instance, attr.key) for attr in mapper.column_attrs}


class AuthorizedRepository:
    """CRUD on marketplace tables on behalf of one caller."""

    def __init__(
        self,
        db: AsyncSession,
        caller: Caller,
        registry: Optional[PolicyRegistry] = None,
        lookups: Optional[MarketplaceLookups] = None,
    ):
        self.db = db
        self.caller = caller
        self.registry = registry if registry is not None else get_policy_registry()
        self.context = PolicyContext(
            caller=caller, lookups=lookups or MarketplaceLookups(db)
        )

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    async def can(
        self,
        operation: Operation,
        instance: Any,
        changes: Optional[dict] = None,
    ) -> Decision:
        """Evaluate without raising; ``changes`` only applies to updates."""
        row = row_snapshot(instance)
        new_row = {**row, **(changes or {})} if operation == Operation.UPDATE else None
        return await evaluate(
            self.registry,
            self.context,
            instance.__tablename__,
            operation,
            row,
            new_row,
        )

    async def _authorize(
        self,
        table: str,
        operation: Operation,
        row: Optional[dict],
        new_row: Optional[dict] = None,
    ) -> Decision:
        return await authorize(
            self.registry, self.context, table, operation, row, new_row
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list(
        self,
        model: type[ModelT],
        *criteria,
        order_by=None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[ModelT]:
        """Rows of ``model`` matching ``criteria`` that the caller may see.

        Rows hidden by policy are filtered out, as Postgres does for SELECT.
        A table whose SELECT is locked entirely raises ``PolicyDeniedError``.
        Paging happens in SQL when the policy scopes select exactly the
        visible rows, and after the per-row filter otherwise.
        """
        table = model.__tablename__
        query = select(model).where(*criteria)
        scoped = True

        if self.registry.is_rls_enabled(table):
            permissive, restrictive = self.registry.policies_for(
                table, Operation.SELECT
            )
            if not permissive:
                await self._authorize(table, Operation.SELECT, None)
            if all(p.scope is not None for p in permissive):
                query = query.where(or_(*(p.scope(self.caller) for p in permissive)))
            else:
                scoped = False
            # Restrictive policies have no SQL form
            if restrictive:
                scoped = False

        if order_by is not None:
            query = query.order_by(order_by)
        if scoped:
            query = query.offset(offset or None).limit(limit)
        result = await self.db.execute(query)
        rows = result.scalars().all()

        visible = []
        for row in rows:
            decision = await evaluate(
                self.registry,
                self.context,
                table,
                Operation.SELECT,
                row_snapshot(row),
            )
            if decision.allowed:
                visible.append(row)

        if scoped:
            return visible
        if offset:
            visible = visible[offset:]
        if limit is not None:
            visible = visible[:limit]
        return visible

    async def _load(self, model: type[ModelT], row_id: uuid.UUID) -> ModelT:
        instance = await self.db.get(model, row_id)
        if instance is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"{model.__tablename__} row not found",
            )
        return instance

    async def get(self, model: type[ModelT], row_id: uuid.UUID) -> ModelT:
        """Fetch one row; raises ``PolicyDeniedError`` if it is not visible."""
        instance = await self._load(model, row_id)
        await self._authorize(
            model.__tablename__, Operation.SELECT, row_snapshot(instance)
        )
        return instance

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def _commit(self, table: str) -> None:
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            logger.info("Constraint violation on %s: %s", table, exc.orig)
            raise ConstraintViolationError(table, str(exc.orig)) from exc

    async def insert(self, instance: ModelT) -> ModelT:
        (inserted,) = await self.insert_many(instance)
        return inserted

    async def insert_many(self, *instances: Any) -> list:
        """Insert rows in one transaction; any denial rolls back all of them.

        Each row is flushed before the next is checked, so a later row's
        policy can see an earlier one (e.g. order items of a new order).
        """
        table = None
        try:
            for instance in instances:
                table = instance.__tablename__
                await self._authorize(table, Operation.INSERT, row_snapshot(instance))
                self.db.add(instance)
                await self.db.flush()
        except PolicyDeniedError:
            await self.db.rollback()
            raise
        except IntegrityError as exc:
            await self.db.rollback()
            logger.info("Constraint violation on %s: %s", table, exc.orig)
            raise ConstraintViolationError(table, str(exc.orig)) from exc

        await self._commit(table)
        for instance in instances:
            await self.db.refresh(instance)
            logger.info(
                "Inserted %s %s for %s",
                instance.__tablename__,
                instance.id,
                self.caller.user_id,
            )
        return list(instances)

    async def update(
        self, model: type[ModelT], row_id: uuid.UUID, changes: dict
    ) -> ModelT:
        """Apply ``changes`` if the old row passes USING and the new row CHECK."""
        instance = await self._load(model, row_id)
        table = model.__tablename__
        old_row = row_snapshot(instance)
        new_row = {**old_row, **changes}
        await self._authorize(table, Operation.UPDATE, old_row, new_row)

        for key, value in changes.items():
            setattr(instance, key, value)
        await self._commit(table)
        await self.db.refresh(instance)
        return instance

    async def delete(self, model: type[ModelT], row_id: uuid.UUID) -> None:
        instance = await self._load(model, row_id)
        table = model.__tablename__
        await self._authorize(table, Operation.DELETE, row_snapshot(instance))
        await self.db.delete(instance)
        await self._commit(table)
        logger.info("Deleted %s %s for %s", table, row_id, self.caller.user_id)
