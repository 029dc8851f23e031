"""Input Schemas - pydantic models and policies for untrusted input.

Invariants:
    - Schemas validate at the system boundary (forms, import rows, stored snapshots)
    - Limits come from a ValidationPolicy passed at validation time, never globals
"""
