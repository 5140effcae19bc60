"""
EVA - Belief-Aware Therapeutic Conversation Core

This package provides the inference-and-routing engine behind the EVA
support platform: crisis screening, preference inference, modality
routing, safety planning and guided dialectic sessions.

IMPORTANT: This is a safety-critical system. Crisis assessment gates
every other step of message processing.
"""

__version__ = "0.1.0"
__author__ = "EVA Engineering Team"
