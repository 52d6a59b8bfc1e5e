"""
Tax Kernel

Shared infrastructure for the tax determination engine:
- Typed exception hierarchy with machine-readable codes
- Structured JSON logging
- Injectable clock
- Rate-table value objects and domain enums
- SQLAlchemy base classes and session helpers
"""

__version__ = "0.1.0"
