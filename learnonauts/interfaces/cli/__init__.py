"""
CLI Interface - Command-line tools for Learnonauts.

Provides commands for:
- Running the API server
- Applying and inspecting schema migrations
"""

from .main import app, main

__all__ = ["app", "main"]
