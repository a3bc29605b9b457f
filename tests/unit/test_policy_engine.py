"""Unit tests for the row-level policy engine.

Policies here are built inline; no database or HTTP layer is involved.
"""

import uuid

import pytest
from services.marketplace_service.models import UserRole
from services.marketplace_service.policies import (
    Caller,
    DenialReason,
    Operation,
    Policy,
    PolicyContext,
    PolicyDeniedError,
    PolicyRegistry,
    authorize,
    build_registry,
    evaluate,
)
from services.marketplace_service.policies.predicates import (
    all_of,
    always,
    caller_is_admin,
    owned_by,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _ctx(role=UserRole.CUSTOMER, lookups=None):
    return PolicyContext(caller=Caller(uuid.uuid4(), role), lookups=lookups)


def _notes_registry(*policies):
    return PolicyRegistry().enable_rls("notes").register(*policies)


OWNER_SELECT = Policy(
    name="Owners can read notes",
    table="notes",
    operations={Operation.SELECT},
    using=owned_by("user_id"),
)


# ---------------------------------------------------------------------------
# Table-level rules
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_table_without_rls_is_unrestricted():
    registry = PolicyRegistry()
    decision = await evaluate(registry, _ctx(), "categories", Operation.DELETE, {})
    assert decision.allowed
    assert decision.reason is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_rls_without_policy_denies_every_operation():
    registry = PolicyRegistry().enable_rls("notes")
    ctx = _ctx(role=UserRole.ADMIN)

    for operation in Operation:
        decision = await evaluate(registry, ctx, "notes", operation, {}, {})
        assert not decision
        assert decision.reason == DenialReason.MISSING_POLICY


@pytest.mark.asyncio
@pytest.mark.unit
async def test_policy_for_other_operation_does_not_grant():
    registry = _notes_registry(OWNER_SELECT)
    ctx = _ctx()
    row = {"user_id": ctx.caller.user_id}

    assert await evaluate(registry, ctx, "notes", Operation.SELECT, row)
    decision = await evaluate(registry, ctx, "notes", Operation.DELETE, row)
    assert decision.reason == DenialReason.MISSING_POLICY


# ---------------------------------------------------------------------------
# USING / WITH CHECK
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_using_failure_reports_reason_and_no_policy():
    registry = _notes_registry(OWNER_SELECT)
    decision = await evaluate(
        registry, _ctx(), "notes", Operation.SELECT, {"user_id": uuid.uuid4()}
    )
    assert decision.reason == DenialReason.USING_FAILED
    assert decision.policy is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_null_owner_matches_nobody():
    registry = _notes_registry(OWNER_SELECT)
    decision = await evaluate(
        registry, _ctx(), "notes", Operation.SELECT, {"user_id": None}
    )
    assert not decision


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_checks_old_row_with_using_and_new_row_with_check():
    registry = _notes_registry(
        Policy(
            name="Owners edit notes",
            table="notes",
            operations={Operation.UPDATE},
            using=owned_by("user_id"),
            check=owned_by("user_id"),
        )
    )
    ctx = _ctx()
    mine = {"user_id": ctx.caller.user_id}
    theirs = {"user_id": uuid.uuid4()}

    allowed = await evaluate(registry, ctx, "notes", Operation.UPDATE, mine, mine)
    assert allowed.policy == "Owners edit notes"

    # Handing the row to someone else fails WITH CHECK
    handed_off = await evaluate(registry, ctx, "notes", Operation.UPDATE, mine, theirs)
    assert handed_off.reason == DenialReason.CHECK_FAILED

    # Someone else's row fails USING before the new row is looked at
    foreign = await evaluate(registry, ctx, "notes", Operation.UPDATE, theirs, mine)
    assert foreign.reason == DenialReason.USING_FAILED


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_without_check_reuses_using_for_new_row():
    registry = _notes_registry(
        Policy(
            name="Owners edit notes",
            table="notes",
            operations={Operation.UPDATE},
            using=owned_by("user_id"),
        )
    )
    ctx = _ctx()
    decision = await evaluate(
        registry,
        ctx,
        "notes",
        Operation.UPDATE,
        {"user_id": ctx.caller.user_id},
        {"user_id": uuid.uuid4()},
    )
    assert decision.reason == DenialReason.CHECK_FAILED


@pytest.mark.asyncio
@pytest.mark.unit
async def test_insert_evaluates_check_against_new_row():
    registry = _notes_registry(
        Policy(
            name="Owners add notes",
            table="notes",
            operations={Operation.INSERT},
            check=owned_by("user_id"),
        )
    )
    ctx = _ctx()
    assert await evaluate(
        registry, ctx, "notes", Operation.INSERT, {"user_id": ctx.caller.user_id}
    )
    denied = await evaluate(
        registry, ctx, "notes", Operation.INSERT, {"user_id": uuid.uuid4()}
    )
    assert denied.reason == DenialReason.CHECK_FAILED


# ---------------------------------------------------------------------------
# Combining policies
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_permissive_policies_are_ored():
    registry = _notes_registry(
        OWNER_SELECT,
        Policy(
            name="Admins read notes",
            table="notes",
            operations={Operation.SELECT},
            using=caller_is_admin,
        ),
    )
    row = {"user_id": uuid.uuid4()}

    assert not await evaluate(registry, _ctx(), "notes", Operation.SELECT, row)
    decision = await evaluate(
        registry, _ctx(role=UserRole.ADMIN), "notes", Operation.SELECT, row
    )
    assert decision.policy == "Admins read notes"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_restrictive_policy_is_anded():
    registry = _notes_registry(
        OWNER_SELECT,
        Policy(
            name="Archived notes are hidden",
            table="notes",
            operations={Operation.SELECT},
            using=lambda ctx, row: not row.get("archived"),
            permissive=False,
        ),
    )
    ctx = _ctx()
    row = {"user_id": ctx.caller.user_id, "archived": False}

    assert await evaluate(registry, ctx, "notes", Operation.SELECT, row)
    archived = await evaluate(
        registry, ctx, "notes", Operation.SELECT, {**row, "archived": True}
    )
    assert archived.reason == DenialReason.USING_FAILED


@pytest.mark.asyncio
@pytest.mark.unit
async def test_restrictive_policy_alone_grants_nothing():
    registry = _notes_registry(
        Policy(
            name="Only open notes",
            table="notes",
            operations={Operation.SELECT},
            using=always,
            permissive=False,
        )
    )
    decision = await evaluate(registry, _ctx(), "notes", Operation.SELECT, {})
    assert decision.reason == DenialReason.MISSING_POLICY


@pytest.mark.asyncio
@pytest.mark.unit
async def test_async_predicates_and_all_of_short_circuit():
    calls = []

    async def slow_lookup(ctx, row):
        calls.append(row)
        return True

    registry = _notes_registry(
        Policy(
            name="Owners add looked-up notes",
            table="notes",
            operations={Operation.INSERT},
            check=all_of(owned_by("user_id"), slow_lookup),
        )
    )
    ctx = _ctx()

    denied = await evaluate(
        registry, ctx, "notes", Operation.INSERT, {"user_id": uuid.uuid4()}
    )
    assert not denied
    assert calls == []

    allowed = await evaluate(
        registry, ctx, "notes", Operation.INSERT, {"user_id": ctx.caller.user_id}
    )
    assert allowed
    assert len(calls) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_authorize_raises_forbidden_with_reason():
    registry = PolicyRegistry().enable_rls("notes")

    with pytest.raises(PolicyDeniedError) as exc_info:
        await authorize(registry, _ctx(), "notes", Operation.SELECT, {})

    assert exc_info.value.status_code == 403
    assert exc_info.value.reason == DenialReason.MISSING_POLICY
    assert "missing_policy" in exc_info.value.detail


# ---------------------------------------------------------------------------
# Registry validation
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_policy_requires_using_for_reads():
    with pytest.raises(ValueError):
        Policy(name="broken", table="notes", operations={Operation.SELECT})


@pytest.mark.unit
def test_policy_requires_check_for_inserts():
    with pytest.raises(ValueError):
        Policy(name="broken", table="notes", operations={Operation.INSERT})


@pytest.mark.unit
def test_register_requires_rls_enabled():
    with pytest.raises(ValueError):
        PolicyRegistry().register(OWNER_SELECT)


@pytest.mark.unit
def test_register_rejects_duplicate_names():
    registry = _notes_registry(OWNER_SELECT)
    with pytest.raises(ValueError):
        registry.register(OWNER_SELECT)


@pytest.mark.unit
def test_build_registry_rejects_unknown_set():
    with pytest.raises(ValueError):
        build_registry(["core", "everything"])
