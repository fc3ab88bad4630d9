"""
Application layer.

The application layer orchestrates domain objects and defines the boundaries
of the system. It contains use cases that represent the operations available
to external actors.

This layer contains:
- Use Cases: Orchestrate domain logic for one inbound operation
- Protocols: Interfaces the infrastructure layer implements
- DTOs: Data transfer objects for input/output
"""
