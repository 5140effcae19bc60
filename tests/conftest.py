"""Tests configuration and fixtures."""

import random
from typing import Optional

import pytest

from eva.config import Settings
from eva.config.settings import BeliefStoreSettings
from eva.domain.models.message import Message
from eva.infrastructure.llm.provider import GenerationResult, GenerationService
from eva.services.prompt.prompt_builder import GenerationRequest


class FakeGenerationService(GenerationService):
    """In-memory generation service recording every request."""

    def __init__(
        self,
        replies: Optional[list[str]] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.replies = list(replies or [])
        self.error = error
        self.requests: list[GenerationRequest] = []

    @property
    def provider_name(self) -> str:
        return "fake"

    @property
    def default_model(self) -> str:
        return "fake-model"

    async def generate(
        self,
        request: GenerationRequest,
        *,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> GenerationResult:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        content = self.replies.pop(0) if self.replies else "Generated reply."
        return GenerationResult(content=content, provider=self.provider_name)

    def is_configured(self) -> bool:
        return True


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings with the belief store disabled."""
    return Settings(
        env="development",
        debug=True,
        belief_store=BeliefStoreSettings(enabled=False),
    )


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for reproducible adaptation."""
    return random.Random(1234)


@pytest.fixture
def fake_generation() -> FakeGenerationService:
    return FakeGenerationService()


@pytest.fixture
def cbt_history() -> list[Message]:
    """History whose user messages lean heavily toward CBT vocabulary."""
    return [
        Message.user("I thought about the evidence and I want something practical."),
        Message.assistant("That makes sense."),
        Message.user("My thought is the evidence should point to a practical plan."),
    ]


@pytest.fixture
def generation_factory() -> type[FakeGenerationService]:
    """Build fake generation services with canned replies or errors."""
    return FakeGenerationService
