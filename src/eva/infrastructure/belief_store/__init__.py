"""External belief store package."""

from eva.infrastructure.belief_store.client import (
    BeliefStore,
    BeliefStoreUnavailable,
    HttpBeliefStore,
    Readiness,
    extract_preferences,
)

__all__ = [
    "BeliefStore",
    "BeliefStoreUnavailable",
    "HttpBeliefStore",
    "Readiness",
    "extract_preferences",
]
