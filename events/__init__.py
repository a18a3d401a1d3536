"""
Ongoing events pipeline: extraction, affinity, filtering, compression, formatting.

Import directly:
    from events.service import ongoing_events_service
"""

from events.affinity import AffinityResolver, NON_LOCATIONAL_PART_TYPES
from events.catalog import EventCatalog, strip_label_metadata
from events.compression import CompressionEngine, TemplateRegistry
from events.extractor import SituationExtractor, accepted_age_marker, task_display_label
from events.filter_policy import ConflictSignal, FilterPolicy
from events.formatter import format_events_block, strip_markup
from events.migration import migrate_legacy_blacklist
from events.relevance import ContextRelevanceFilter, collect_participant_ids
from events.session import EventSession
from events.service import (
    ContextChannel,
    MessageChannel,
    OngoingEventsService,
    PromptRequest,
    deliver_block,
    ongoing_events_service,
)

__all__ = [
    "AffinityResolver",
    "NON_LOCATIONAL_PART_TYPES",
    "EventCatalog",
    "strip_label_metadata",
    "CompressionEngine",
    "TemplateRegistry",
    "SituationExtractor",
    "accepted_age_marker",
    "task_display_label",
    "ConflictSignal",
    "FilterPolicy",
    "format_events_block",
    "strip_markup",
    "migrate_legacy_blacklist",
    "ContextRelevanceFilter",
    "collect_participant_ids",
    "EventSession",
    "ContextChannel",
    "MessageChannel",
    "OngoingEventsService",
    "PromptRequest",
    "deliver_block",
    "ongoing_events_service",
]
