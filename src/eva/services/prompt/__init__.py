"""Prompt construction package."""

from eva.services.prompt.prompt_builder import GenerationRequest, PromptBuilder, RoutingContext

__all__ = [
    "GenerationRequest",
    "PromptBuilder",
    "RoutingContext",
]
