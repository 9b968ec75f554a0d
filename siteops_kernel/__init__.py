"""
Site Operations Kernel

Shared infrastructure for the site-operations packages:
- Structured JSON logging with request-scoped context
- Typed exception hierarchy with machine-readable codes
- Injectable clock
- SQLAlchemy engine and declarative base
"""

__version__ = "0.1.0"
