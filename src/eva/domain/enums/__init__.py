"""Domain enumerations."""

from eva.domain.enums.therapeutic_modality import TherapeuticModality, ChangeBelief

__all__ = ["TherapeuticModality", "ChangeBelief"]
