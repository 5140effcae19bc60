"""
Incident History Interface

Contract for the persistence collaborator that counts recent
high/critical crisis assessments for a user. The core never stores
assessments itself.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class IncidentHistory(Protocol):
    """Lookup of recent high-risk incidents."""

    async def count_recent_high_risk_incidents(
        self,
        user_id: str,
        window_hours: int = 24,
    ) -> int:
        """
        Count HIGH/CRITICAL assessments for a user in the lookback window.

        Args:
            user_id: User identifier
            window_hours: Lookback window in hours

        Returns:
            Number of incidents (0 when none)
        """
        ...
