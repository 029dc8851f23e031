"""Core Layer - pure domain logic, no IO, no async, no logging setup.

Invariants:
    - No module in core/ imports from services/ or infrastructure/
    - All functions are deterministic given their injected collaborators
      (IdGenerator, Clock)
"""
