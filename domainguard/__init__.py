"""domainguard - valid-by-construction entities and boundary enforcement.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Explicit imports from submodules only, no star exports
"""
