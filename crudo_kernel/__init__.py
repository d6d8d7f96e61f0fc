"""
Crudo Kernel - shared infrastructure for the crudo loader.

- Structured JSON logging with request-scoped context
- Typed exception hierarchy with machine-readable codes
- Destination store engine and per-request connection scope
"""

__version__ = "0.1.0"
