"""
EVA Infrastructure Layer

Adapters for external collaborators: generation providers and the
belief store. Each adapter implements an abstract interface so the
core can be tested with fakes.
"""
