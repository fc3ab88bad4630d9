"""
Domain layer.

The domain layer contains the core learning and analytics rules.
It has no dependencies on external frameworks or infrastructure.

This layer contains:
- Entities: Objects with identity and lifecycle
- Value Objects: Immutable objects defined by attributes
- Domain Services: Pure logic spanning several objects
"""
