"""
Safety Plan Models

Support resources, the templated crisis response and the
personalized coping plan.

LEGAL_REVIEW_REQUIRED: Resource contact details must be verified
before production use.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SupportResource:
    """
    A single crisis support resource.

    Attributes:
        name: Resource name
        contact: How to reach it
        description: Brief description
        resource_type: text, phone or emergency
    """

    name: str
    contact: str
    description: str = ""
    resource_type: str = "phone"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "contact": self.contact,
            "description": self.description,
            "type": self.resource_type,
        }

    def format_for_user(self) -> str:
        """Format resource for display to user."""
        return f"• {self.name}: {self.contact}"


@dataclass(frozen=True)
class CrisisResponse:
    """
    Templated response for elevated crisis risk.

    Attributes:
        message: Text shown to the person
        resources: The canonical support resources
        follow_up_required: Always True
    """

    message: str
    resources: tuple[SupportResource, ...]
    follow_up_required: bool = True

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "resources": [r.to_dict() for r in self.resources],
            "follow_up_required": self.follow_up_required,
        }


@dataclass(frozen=True)
class SafetyPlan:
    """
    Personalized safety plan.

    Attributes:
        immediate_steps: Ordered first actions
        coping_strategies: Modality-dependent strategies
        support_resources: The canonical support resources
        reminder: Short closing reassurance
    """

    immediate_steps: tuple[str, ...]
    coping_strategies: tuple[str, ...]
    support_resources: tuple[SupportResource, ...]
    reminder: str = ""
    modality: str = "humanistic"

    def to_dict(self) -> dict:
        return {
            "immediate_steps": list(self.immediate_steps),
            "coping_strategies": list(self.coping_strategies),
            "support_resources": [r.to_dict() for r in self.support_resources],
            "reminder": self.reminder,
            "modality": self.modality,
        }

