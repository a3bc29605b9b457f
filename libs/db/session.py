import json
from typing import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncSession

from libs.db.config import AsyncSessionLocal

_SET_CLAIMS = text("SELECT set_config('request.jwt.claims', :claims, true)")
_SET_ROLE = text("SET LOCAL ROLE authenticated")


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields an async database session.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def bind_rls_identity(session: AsyncSession, user_id: str) -> None:
    """
    Run every transaction of ``session`` as ``user_id`` under Postgres
    row-level security.

    Supabase's ``auth.uid()`` reads ``request.jwt.claims``; switching to the
    ``authenticated`` role makes policies apply (table owners bypass RLS).
    Both settings are transaction-local, so they are re-applied whenever the
    session begins a new transaction. No-op on other databases.
    """
    if session.get_bind().dialect.name != "postgresql":
        return
    params = {"claims": json.dumps({"sub": user_id, "role": "authenticated"})}

    @event.listens_for(session.sync_session, "after_begin")
    def _apply_identity(sync_session, transaction, connection):
        connection.execute(_SET_CLAIMS, params)
        connection.execute(_SET_ROLE)

    if session.in_transaction():
        await session.execute(_SET_CLAIMS, params)
        await session.execute(_SET_ROLE)
