"""Modality routing package."""

from eva.services.modality.modality_config import (
    COMMUNICATION_STYLES,
    FALLBACK_RESPONSES,
    MODALITY_CONFIGS,
    ModalityConfig,
    communication_style,
    fallback_response,
    get_modality_config,
)
from eva.services.modality.router import ModalityRouter
from eva.services.modality.style_adapter import StyleAdapter

__all__ = [
    # Configuration
    "ModalityConfig",
    "MODALITY_CONFIGS",
    "COMMUNICATION_STYLES",
    "FALLBACK_RESPONSES",
    "communication_style",
    "fallback_response",
    "get_modality_config",
    # Routing
    "ModalityRouter",
    "StyleAdapter",
]
