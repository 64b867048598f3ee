"""
Compliance Search Shared Library
================================

Configuration, logging, LLM access and models shared by the search service.

Modules:
    - config: Configuration management with Pydantic Settings
    - logging: Structured logging with structlog
    - llm: Hosted language-model abstraction (OpenAI, Claude)
    - models: Shared Pydantic models

Version: 0.1.0
"""

__version__ = "0.1.0"

from shared.config import settings
from shared.logging import get_logger, setup_logging

__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
    "__version__",
]
