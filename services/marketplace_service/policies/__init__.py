"""Row-level authorization policies for the marketplace tables."""

from functools import lru_cache
from typing import Iterable

from libs.common.config import get_settings
from services.marketplace_service.policies.core import CORE_RLS_TABLES, core_registry
from services.marketplace_service.policies.engine import (
    Caller,
    Decision,
    DenialReason,
    Operation,
    Policy,
    PolicyContext,
    PolicyDeniedError,
    PolicyRegistry,
    authorize,
    evaluate,
)
from services.marketplace_service.policies.marketplace import (
    MARKETPLACE_RLS_TABLES,
    marketplace_registry,
)

POLICY_SETS = {
    "core": core_registry,
    "marketplace": marketplace_registry,
}


def build_registry(policy_sets: Iterable[str]) -> PolicyRegistry:
    """Merge the named policy sets into one registry."""
    registry = PolicyRegistry()
    for name in policy_sets:
        try:
            factory = POLICY_SETS[name]
        except KeyError:
            raise ValueError(f"Unknown policy set {name!r}") from None
        registry.extend(factory())
    return registry


@lru_cache
def get_policy_registry() -> PolicyRegistry:
    """Registry for the policy sets enabled in settings, cached."""
    return build_registry(get_settings().RLS_POLICY_SETS)


__all__ = [
    "CORE_RLS_TABLES",
    "Caller",
    "Decision",
    "DenialReason",
    "MARKETPLACE_RLS_TABLES",
    "Operation",
    "POLICY_SETS",
    "Policy",
    "PolicyContext",
    "PolicyDeniedError",
    "PolicyRegistry",
    "authorize",
    "build_registry",
    "evaluate",
    "get_policy_registry",
]
