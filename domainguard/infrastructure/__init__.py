"""Infrastructure Layer - logging setup and reference collaborator implementations.

Invariants:
    - Implementations satisfy core protocols structurally, without inheriting
"""
