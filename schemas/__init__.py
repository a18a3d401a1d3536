"""
Pydantic schemas for type-safe data transfer.
"""

from schemas.filterable import EventCategory, FilterableEntity
from schemas.snapshot import SituationSnapshot
from schemas.templates import (
    CompressionTemplate,
    RuleStringEntry,
    ExtractionRule,
    DEFAULT_EXTRACTION_RULES,
)
from schemas.filter_settings import DisabledInstanceSet, EventFilterSettings

__all__ = [
    "EventCategory",
    "FilterableEntity",
    "SituationSnapshot",
    "CompressionTemplate",
    "RuleStringEntry",
    "ExtractionRule",
    "DEFAULT_EXTRACTION_RULES",
    "DisabledInstanceSet",
    "EventFilterSettings",
]
