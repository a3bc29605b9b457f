"""Row-level authorization engine.

Every (table, operation) pair is decided centrally from the policies in a
``PolicyRegistry``, with the same semantics Postgres applies to
``CREATE POLICY``:

- a table without row-level security enabled is unrestricted;
- a table with RLS enabled and no permissive policy for the operation is
  denied (fail-closed);
- select/delete need the existing row to pass a policy's USING predicate,
  insert needs the new row to pass a WITH CHECK predicate, update needs both
  (a policy without WITH CHECK reuses its USING predicate for the new row);
- permissive policies are OR-ed, restrictive policies are AND-ed on top.

Predicates are plain callables ``(PolicyContext, row) -> bool``. A predicate
that needs other tables (e.g. "has this caller ordered the product?") asks
``ctx.lookups`` and returns an awaitable instead.
"""

import enum
import inspect
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional, Union

from fastapi import HTTPException, status
from libs.common.logging import get_logger
from services.marketplace_service.models.enums import UserRole

logger = get_logger(__name__)


class Operation(str, enum.Enum):
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


ALL_OPERATIONS = frozenset(Operation)

Row = Mapping[str, Any]


@dataclass(frozen=True)
class Caller:
    """The identity a request runs as, supplied by the auth provider."""

    user_id: uuid.UUID
    role: UserRole = UserRole.CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


@dataclass
class PolicyContext:
    caller: Caller
    # Repository-layer queries for cross-table predicates
    # (see services.marketplace_service.services.lookups).
    lookups: Any = None


Predicate = Callable[[PolicyContext, Row], Union[bool, Awaitable[bool]]]
Scope = Callable[[Caller], Any]


@dataclass(frozen=True)
class Policy:
    """A named USING / WITH CHECK pair for some operations on one table.

    ``scope`` optionally mirrors ``using`` as a SQL filter so list queries can
    push the predicate into the database. The Python predicate stays
    authoritative.
    """

    name: str
    table: str
    operations: frozenset
    using: Optional[Predicate] = None
    check: Optional[Predicate] = None
    scope: Optional[Scope] = None
    permissive: bool = True

    def __post_init__(self):
        object.__setattr__(
            self, "operations", frozenset(Operation(op) for op in self.operations)
        )
        if not self.operations:
            raise ValueError(f"Policy {self.name!r} applies to no operation")
        needs_using = self.operations & {
            Operation.SELECT,
            Operation.UPDATE,
            Operation.DELETE,
        }
        if needs_using and self.using is None:
            raise ValueError(
                f"Policy {self.name!r} needs a USING predicate for "
                f"{sorted(op.value for op in needs_using)}"
            )
        if Operation.INSERT in self.operations and self.check_predicate is None:
            raise ValueError(f"Policy {self.name!r} needs a WITH CHECK predicate")

    @property
    def check_predicate(self) -> Optional[Predicate]:
        return self.check if self.check is not None else self.using


class DenialReason(str, enum.Enum):
    MISSING_POLICY = "missing_policy"
    USING_FAILED = "using_failed"
    CHECK_FAILED = "check_failed"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    table: str
    operation: Operation
    reason: Optional[DenialReason] = None
    policy: Optional[str] = None

    def __bool__(self) -> bool:
        return self.allowed


class PolicyDeniedError(HTTPException):
    """The caller may not perform the operation on this row."""

    def __init__(self, decision: Decision):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=(
                f"Not allowed to {decision.operation.value} "
                f"{decision.table} ({decision.reason.value})"
            ),
        )
        self.decision = decision

    @property
    def reason(self) -> DenialReason:
        return self.decision.reason


@dataclass
class PolicyRegistry:
    """Tables with row-level security and the policies attached to them."""

    rls_tables: set = field(default_factory=set)
    policies: dict = field(default_factory=dict)

    def enable_rls(self, *tables: str) -> "PolicyRegistry":
        self.rls_tables.update(tables)
        return self

    def is_rls_enabled(self, table: str) -> bool:
        return table in self.rls_tables

    def register(self, *policies: Policy) -> "PolicyRegistry":
        for policy in policies:
            if not self.is_rls_enabled(policy.table):
                raise ValueError(
                    f"Policy {policy.name!r}: row level security is not "
                    f"enabled on {policy.table}"
                )
            for operation in policy.operations:
                key = (policy.table, operation)
                existing = self.policies.setdefault(key, [])
                if any(p.name == policy.name for p in existing):
                    raise ValueError(
                        f"Duplicate policy {policy.name!r} on {policy.table}"
                    )
                existing.append(policy)
        return self

    def extend(self, other: "PolicyRegistry") -> "PolicyRegistry":
        self.enable_rls(*other.rls_tables)
        seen = set()
        for policies in other.policies.values():
            for policy in policies:
                if id(policy) not in seen:
                    seen.add(id(policy))
                    self.register(policy)
        return self

    def policies_for(
        self, table: str, operation: Operation
    ) -> tuple[list[Policy], list[Policy]]:
        """Return ``(permissive, restrictive)`` policies for the pair."""
        policies = self.policies.get((table, Operation(operation)), [])
        permissive = [p for p in policies if p.permissive]
        restrictive = [p for p in policies if not p.permissive]
        return permissive, restrictive


async def passes(predicate: Predicate, ctx: PolicyContext, row: Row) -> bool:
    result = predicate(ctx, row)
    if inspect.isawaitable(result):
        result = await result
    # None (SQL NULL) counts as false
    return bool(result)


async def _phase(
    permissive: Iterable[Policy],
    restrictive: Iterable[Policy],
    predicate_of: Callable[[Policy], Optional[Predicate]],
    ctx: PolicyContext,
    row: Row,
) -> Optional[Policy]:
    """Return the granting permissive policy, or None if the row is refused."""
    granting = None
    for policy in permissive:
        predicate = predicate_of(policy)
        if predicate is not None and await passes(predicate, ctx, row):
            granting = policy
            break
    if granting is None:
        return None
    for policy in restrictive:
        predicate = predicate_of(policy)
        if predicate is not None and not await passes(predicate, ctx, row):
            return None
    return granting


async def evaluate(
    registry: PolicyRegistry,
    ctx: PolicyContext,
    table: str,
    operation: Operation,
    row: Optional[Row] = None,
    new_row: Optional[Row] = None,
) -> Decision:
    """Decide whether ``ctx.caller`` may run ``operation`` on ``row``.

    ``row`` is the existing row for select/update/delete and the row being
    written for insert. ``new_row`` is the updated row for update.
    """
    operation = Operation(operation)
    if not registry.is_rls_enabled(table):
        return Decision(True, table, operation)

    permissive, restrictive = registry.policies_for(table, operation)
    if not permissive:
        return Decision(False, table, operation, DenialReason.MISSING_POLICY)

    granting = None
    if operation in (Operation.SELECT, Operation.UPDATE, Operation.DELETE):
        granting = await _phase(
            permissive, restrictive, lambda p: p.using, ctx, row or {}
        )
        if granting is None:
            return Decision(False, table, operation, DenialReason.USING_FAILED)

    if operation in (Operation.INSERT, Operation.UPDATE):
        candidate = new_row if operation is Operation.UPDATE else row
        granting = await _phase(
            permissive,
            restrictive,
            lambda p: p.check_predicate,
            ctx,
            candidate or {},
        )
        if granting is None:
            return Decision(False, table, operation, DenialReason.CHECK_FAILED)

    return Decision(True, table, operation, policy=granting.name)


async def authorize(
    registry: PolicyRegistry,
    ctx: PolicyContext,
    table: str,
    operation: Operation,
    row: Optional[Row] = None,
    new_row: Optional[Row] = None,
) -> Decision:
    """Like ``evaluate`` but raises ``PolicyDeniedError`` on denial."""
    decision = await evaluate(registry, ctx, table, operation, row, new_row)
    if not decision.allowed:
        logger.info(
            "Denied %s on %s for caller %s: %s",
            decision.operation.value,
            table,
            ctx.caller.user_id,
            decision.reason.value,
        )
        raise PolicyDeniedError(decision)
    return decision
