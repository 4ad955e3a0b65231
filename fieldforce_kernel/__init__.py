"""
FieldForce Kernel

Shared infrastructure for the field-force expense system:
- Structured JSON logging with request-scoped context
- Typed exception hierarchy with machine-readable codes
- Injectable clock for deterministic time
- SQLAlchemy declarative base and session management
"""

__version__ = "0.1.0"
