"""Services Layer - scopes and reference resolution around the pure core.

Invariants:
    - The only place where gateway IO is awaited
    - Scopes are never shared between concurrent units of work
"""
