"""
EVA Services Layer

Decision logic of the core: crisis screening, preference inference,
modality routing, safety planning and dialectic sessions.
"""
