"""
Session-scoped pipeline wiring.

One EventSession exists per loaded simulation. It owns the mutable state
(affinity cache, filter policy over the persisted settings) and the
components built on it. Sessions are never shared: loading another
simulation means closing this one and building a new one.
"""

from typing import List, Optional, Set

from config.settings import settings
from core import get_logger
from events.affinity import AffinityResolver
from events.catalog import EventCatalog
from events.compression import CompressionEngine, TemplateRegistry
from events.extractor import SituationExtractor
from events.filter_policy import ConflictSignal, FilterPolicy
from events.formatter import format_events_block
from events.relevance import ContextRelevanceFilter
from schemas.filter_settings import EventFilterSettings
from schemas.snapshot import SituationSnapshot
from simulation.adapter import SimulationAdapter
from simulation.models import Region

logger = get_logger(__name__)


class EventSession:
    """Pipeline components bound to one loaded simulation."""

    def __init__(self, adapter: SimulationAdapter, filter_settings: EventFilterSettings):
        self.adapter = adapter
        self.filter_settings = filter_settings

        self.affinity = AffinityResolver()
        self.policy = FilterPolicy(filter_settings, ConflictSignal(adapter.conflicting_feature_active))
        self.extractor = SituationExtractor(adapter, self.affinity, self.policy)
        self.relevance = ContextRelevanceFilter(adapter)
        self.compression = CompressionEngine(
            TemplateRegistry(adapter.compression_templates()),
            adapter.description_rule_strings,
        )
        self.catalog = EventCatalog(adapter, self.extractor, self.affinity, filter_settings)

        logger.info(
            "Event session opened",
            scope_id=adapter.scope_id(),
            templates=len(self.compression.templates),
        )

    @property
    def scope_id(self) -> Optional[str]:
        return self.adapter.scope_id()

    def compressor(self):
        """Compression callable for the formatter, or None when compression is off."""
        if not self.filter_settings.enable_compression:
            return None
        return self.compression.compress

    def collect(
        self,
        region: Optional[Region],
        participant_ids: Optional[Set[int]] = None,
        is_high_danger: bool = False,
    ) -> List[SituationSnapshot]:
        """Extract and, when enabled, narrow to the conversation's participants."""
        snapshots = self.extractor.extract(
            region,
            is_high_danger,
            max_entities=settings.MAX_EVENTS,
            max_lookback=settings.MAX_THREAT_SCAN_BACK,
        )
        if snapshots and self.filter_settings.enable_context_filtering:
            snapshots = self.relevance.filter(snapshots, participant_ids)
        return snapshots

    def build_block(
        self,
        region: Optional[Region],
        participant_ids: Optional[Set[int]] = None,
        is_high_danger: bool = False,
        max_chars: Optional[int] = None,
    ) -> str:
        """
        Ongoing events block for a conversation.

        Args:
            region: Region the conversation happens in
            participant_ids: Actor ids taking part in the conversation
            is_high_danger: Whether to look for a recent threat
            max_chars: Character budget (defaults to settings.PROMPT_MAX_CHARS)

        Returns:
            Formatted block, or an empty string when nothing is ongoing
        """
        snapshots = self.collect(region, participant_ids, is_high_danger)
        if not snapshots:
            return ""

        return format_events_block(
            snapshots,
            max_chars=settings.PROMPT_MAX_CHARS if max_chars is None else max_chars,
            compressor=self.compressor(),
            body_max_chars=settings.BODY_MAX_CHARS,
        )

    def debug_dump(self, region: Optional[Region]) -> int:
        """Log each ongoing situation of a region as its own block. Returns the count."""
        snapshots = self.extractor.extract(
            region,
            False,
            max_entities=settings.MAX_EVENTS,
            max_lookback=settings.MAX_THREAT_SCAN_BACK,
        )
        logger.info(
            "Ongoing situations at region load",
            region_id=region.id if region is not None else None,
            count=len(snapshots),
        )
        for snapshot in snapshots:
            block = format_events_block(
                [snapshot],
                max_chars=settings.DEBUG_DUMP_MAX_CHARS,
                compressor=self.compressor(),
                body_max_chars=settings.BODY_MAX_CHARS,
            )
            logger.info(
                "Ongoing situation",
                tag="THREAT" if snapshot.is_threat else "EVENT",
                label=snapshot.label,
                block=block,
            )
        return len(snapshots)

    def close(self) -> None:
        logger.info("Event session closed", scope_id=self.scope_id, **self.affinity.stats())
        self.affinity.clear()
