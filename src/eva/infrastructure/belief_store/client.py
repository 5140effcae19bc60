"""
Belief Store Client

HTTP client for the external belief-modeling service. The store keeps
a self-model per user, accepts belief statements and dialectic
exchanges, and returns an aggregated belief system from which
therapeutic preferences are extracted.

ARCHITECTURE: Readiness is an explicit awaited `connect()` returning
a Readiness result. Callers decide whether to wire the store in based
on that result; the client itself holds no availability flag.

PRIVACY: Statement text and answers are sent to the store but never
logged here.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from eva.config.logging_config import get_logger
from eva.config.settings import BeliefStoreSettings
from eva.domain.enums.therapeutic_modality import ChangeBelief, TherapeuticModality
from eva.domain.errors import EvaError
from eva.domain.models.preference_profile import (
    CommunicationStyle,
    ProfileSource,
    TherapeuticPreferenceProfile,
)

logger = get_logger(__name__)


class BeliefStoreUnavailable(EvaError):
    """The belief store timed out, errored or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class Readiness:
    """
    Result of a readiness check.

    Attributes:
        ready: Whether the store answered its health check
        detail: Short reason when not ready
        latency_ms: Health check round trip
    """

    ready: bool
    detail: str = ""
    latency_ms: int = 0

    def __bool__(self) -> bool:
        return self.ready


@runtime_checkable
class BeliefStore(Protocol):
    """Contract for the external belief store. Any call may raise BeliefStoreUnavailable."""

    async def connect(self) -> Readiness: ...

    async def ensure_self_model(self, user_id: str) -> dict: ...

    async def submit_statement(
        self, user_id: str, text: str, belief_type: str = "STATEMENT"
    ) -> dict: ...

    async def get_aggregated_preferences(
        self, user_id: str
    ) -> Optional[TherapeuticPreferenceProfile]: ...

    async def create_dialectic(
        self, user_id: str, question: str, answer: Optional[str] = None
    ) -> Optional[str]: ...

    async def update_dialectic(self, user_id: str, dialectic_id: str, answer: str) -> dict: ...

    async def record_outcome(
        self, user_id: str, outcome: dict, conversation_id: Optional[str] = None
    ) -> dict: ...


# Preference extraction from an aggregated belief system
# CLINICAL_REVIEW_REQUIRED
_MODALITY_CUES: tuple[tuple[tuple[str, ...], TherapeuticModality], ...] = (
    (("practical", "solution"), TherapeuticModality.CBT),
    (("growth", "potential"), TherapeuticModality.HUMANISTIC),
    (("mindful", "present"), TherapeuticModality.MINDFULNESS),
)
_OPENNESS_CUES: tuple[str, ...] = ("comfortable sharing", "open")
EXTERNAL_STYLE = CommunicationStyle(directness=5, warmth=7, structure=5, pace=5)
EXTERNAL_CONFIDENCE: float = 0.7


def extract_preferences(belief_system: dict[str, Any]) -> Optional[TherapeuticPreferenceProfile]:
    """
    Extract therapeutic preferences from a belief system payload.

    Beliefs are read in order. Each belief mentioning a modality cue
    sets the primary modality (later beliefs win). Each belief with an
    openness cue raises vulnerability comfort by one, up to 10.

    Returns:
        Profile tagged external, or None when the payload holds no beliefs
    """
    beliefs = belief_system.get("beliefs") or []
    if not beliefs:
        return None

    primary = TherapeuticModality.HUMANISTIC
    comfort = 5

    for belief in beliefs:
        content = str((belief or {}).get("content", "")).lower()

        for cues, modality in _MODALITY_CUES:
            if any(cue in content for cue in cues):
                primary = modality
                break

        if any(cue in content for cue in _OPENNESS_CUES):
            comfort = min(comfort + 1, 10)

    secondary = (
        TherapeuticModality.MINDFULNESS
        if primary == TherapeuticModality.HUMANISTIC
        else TherapeuticModality.HUMANISTIC
    )

    return TherapeuticPreferenceProfile(
        primary_modality=primary,
        secondary_modality=secondary,
        vulnerability_comfort=comfort,
        change_beliefs=ChangeBelief.GRADUAL,
        communication_style=EXTERNAL_STYLE,
        confidence=EXTERNAL_CONFIDENCE,
        source=ProfileSource.EXTERNAL,
    )


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _now_millis() -> int:
    return int(time.time() * 1000)


class HttpBeliefStore:
    """
    httpx-based belief store client.

    Every transport error, timeout and non-2xx status (other than the
    404s that have a defined meaning) is raised as BeliefStoreUnavailable.

    Usage:
        store = HttpBeliefStore.from_settings(get_settings().belief_store)
        readiness = await store.connect()
        if readiness:
            profile = await store.get_aggregated_preferences(user_id)
    """

    HEALTH_PATH = "/health"
    SELF_MODELS_PATH = "/api/self-models"
    BELIEFS_PATH = "/api/beliefs"
    DIALECTICS_PATH = "/api/dialectics"
    BELIEF_SYSTEMS_PATH = "/api/belief-systems"
    OUTCOMES_PATH = "/api/outcomes"

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout_seconds: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize client.

        Args:
            base_url: Belief store base URL
            api_key: Bearer token (optional)
            timeout_seconds: Per-request timeout
            client: Pre-built httpx client (tests inject a MockTransport)
        """
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout_seconds,
            headers=headers,
        )

    @classmethod
    def from_settings(cls, settings: BeliefStoreSettings) -> "HttpBeliefStore":
        return cls(
            base_url=settings.url,
            api_key=settings.api_key.get_secret_value() or None,
            timeout_seconds=settings.timeout_seconds,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def connect(self) -> Readiness:
        """
        Check whether the store is reachable.

        Never raises; an unreachable store yields a not-ready result.
        """
        start = time.time()
        try:
            response = await self._client.get(self.HEALTH_PATH)
        except httpx.HTTPError as e:
            logger.info("Belief store not available", error_type=type(e).__name__)
            return Readiness(ready=False, detail=type(e).__name__)

        latency_ms = int((time.time() - start) * 1000)
        if response.status_code != 200:
            logger.info("Belief store not ready", status_code=response.status_code)
            return Readiness(
                ready=False,
                detail=f"health check returned {response.status_code}",
                latency_ms=latency_ms,
            )

        logger.info("Belief store available", latency_ms=latency_ms)
        return Readiness(ready=True, latency_ms=latency_ms)

    async def ensure_self_model(self, user_id: str) -> dict:
        """Fetch the user's self-model, creating it when missing."""
        response = await self._request(
            "GET", f"{self.SELF_MODELS_PATH}/{user_id}", allow_not_found=True
        )
        if response is not None:
            return self._json(response)

        logger.info("Creating self-model")
        response = await self._request("POST", self.SELF_MODELS_PATH, json={
            "userId": user_id,
            "philosophies": ["therapeutic_mental_health"],
            "metadata": {"domain": "mental_health", "createdAt": _now_iso()},
        })
        return self._json(response)

    async def submit_statement(
        self,
        user_id: str,
        text: str,
        belief_type: str = "STATEMENT",
    ) -> dict:
        """Submit one belief statement taken from conversation."""
        response = await self._request("POST", self.BELIEFS_PATH, json={
            "userId": user_id,
            "content": text,
            "beliefType": belief_type,
            "extrapolateContexts": True,
            "metadata": {"source": "conversation", "timestamp": _now_iso()},
        })
        return self._json(response)

    async def get_belief_system(self, user_id: str) -> Optional[dict]:
        """Fetch the aggregated belief system (None when the store has none)."""
        response = await self._request(
            "GET", f"{self.BELIEF_SYSTEMS_PATH}/{user_id}", allow_not_found=True
        )
        if response is None:
            return None
        return self._json(response)

    async def get_aggregated_preferences(
        self,
        user_id: str,
    ) -> Optional[TherapeuticPreferenceProfile]:
        """Aggregated therapeutic preferences, or None when absent."""
        belief_system = await self.get_belief_system(user_id)
        if not belief_system:
            return None
        return extract_preferences(belief_system)

    async def create_dialectic(
        self,
        user_id: str,
        question: str,
        answer: Optional[str] = None,
    ) -> Optional[str]:
        """Create a therapeutic dialectic. Returns the store's id when given."""
        response = await self._request("POST", self.DIALECTICS_PATH, json={
            "userId": user_id,
            "dialecticType": "THERAPEUTIC",
            "question": question,
            "answer": self._answer(answer) if answer else None,
        })
        dialectic_id = self._json(response).get("id")
        return str(dialectic_id) if dialectic_id is not None else None

    async def update_dialectic(self, user_id: str, dialectic_id: str, answer: str) -> dict:
        """Attach an answer to an existing dialectic."""
        response = await self._request("PUT", f"{self.DIALECTICS_PATH}/{dialectic_id}", json={
            "userId": user_id,
            "answer": self._answer(answer),
        })
        return self._json(response)

    async def record_outcome(
        self,
        user_id: str,
        outcome: dict,
        conversation_id: Optional[str] = None,
    ) -> dict:
        """Record a therapeutic outcome (e.g. preference evolution)."""
        response = await self._request("POST", self.OUTCOMES_PATH, json={
            "userId": user_id,
            "conversationId": conversation_id,
            "outcome": outcome,
            "metadata": {"domain": "mental_health", "timestamp": _now_iso()},
        })
        return self._json(response)

    @staticmethod
    def _answer(answer: str) -> dict:
        return {"userAnswer": answer, "createdAtMillisUtc": _now_millis()}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict] = None,
        allow_not_found: bool = False,
    ) -> Optional[httpx.Response]:
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.TimeoutException as e:
            logger.warning("Belief store timeout", method=method, path=path)
            raise BeliefStoreUnavailable(f"Belief store timeout on {method} {path}") from e
        except httpx.HTTPError as e:
            logger.warning(
                "Belief store transport error",
                method=method,
                path=path,
                error_type=type(e).__name__,
            )
            raise BeliefStoreUnavailable(f"Belief store unreachable: {e}") from e

        if allow_not_found and response.status_code == 404:
            return None

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Belief store HTTP error",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            raise BeliefStoreUnavailable(
                f"Belief store returned {response.status_code} for {method} {path}",
                status_code=response.status_code,
            ) from e

        return response

    @staticmethod
    def _json(response: httpx.Response) -> dict:
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            raise BeliefStoreUnavailable("Belief store returned invalid JSON") from e
        return data if isinstance(data, dict) else {"data": data}
