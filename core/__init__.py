"""
Core utilities and infrastructure for the ongoing events context service.
"""

from core.exceptions import (
    EventContextException,
    TemplateException,
    TemplateParseError,
    RuleLookupError,
    SimulationException,
    HostReadError,
    SessionNotLoadedError,
    ValidationException,
    InvalidInputError,
    MigrationError,
)
from core.logging_config import configure_logging, get_logger

__all__ = [
    "EventContextException",
    "TemplateException",
    "TemplateParseError",
    "RuleLookupError",
    "SimulationException",
    "HostReadError",
    "SessionNotLoadedError",
    "ValidationException",
    "InvalidInputError",
    "MigrationError",
    "configure_logging",
    "get_logger",
]
