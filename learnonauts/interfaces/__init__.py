"""
Interfaces - Entry points into the service.

- api: FastAPI REST API consumed by the Learnonauts frontend
- cli: Command-line tools for serving and database upkeep
"""

__all__ = ["api", "cli"]
