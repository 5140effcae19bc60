"""Orchestration package."""

from eva.services.orchestration.conversation_orchestrator import ConversationOrchestrator

__all__ = ["ConversationOrchestrator"]
