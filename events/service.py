"""
Ongoing events service - lifecycle hooks and prompt delivery.

The host calls these hooks from its own update thread:

- start_session / end_session when a simulation is loaded or unloaded
- on_region_finalized when a region has finished generating
- on_task_state_changed when a task is accepted, ends or changes parts
- decorate_prompt just before a dialogue prompt is sent

No hook ever raises: failures are logged and the prompt goes out without
the block.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, runtime_checkable

from config.settings import settings
from core import EventContextException, SessionNotLoadedError, get_logger
from events.migration import migrate_legacy_blacklist
from events.relevance import NearbyProvider, collect_participant_ids
from events.session import EventSession
from schemas.filter_settings import EventFilterSettings
from simulation.adapter import SimulationAdapter
from simulation.models import Actor, Region

logger = get_logger(__name__)

PROMPT_SEPARATOR = "\n\n"


@runtime_checkable
class ContextChannel(Protocol):
    """Persistent context slot exposed by the dialogue generator."""

    def set_context(self, key: str, text: str) -> None:
        ...


@runtime_checkable
class MessageChannel(Protocol):
    """One-shot message channel exposed by the dialogue generator."""

    def append_message(self, text: str) -> None:
        ...


@dataclass
class PromptRequest:
    """A dialogue prompt about to be generated."""

    region: Optional[Region]
    speakers: List[Actor] = field(default_factory=list)
    is_high_danger: bool = False
    prompt: str = ""
    nearby_provider: Optional[NearbyProvider] = None
    channel: Optional[object] = None


def deliver_block(request: PromptRequest, block: str, context_key: str) -> str:
    """
    Hand the block to the dialogue generator.

    The persistent context channel is preferred, then the message channel.
    Without either, the block is appended to the request's prompt text.

    Returns:
        Name of the channel used
    """
    channel = request.channel
    if isinstance(channel, ContextChannel):
        channel.set_context(context_key, block)
        return "context"
    if isinstance(channel, MessageChannel):
        channel.append_message(block)
        return "message"

    request.prompt = block if not request.prompt else request.prompt + PROMPT_SEPARATOR + block
    return "prompt"


class OngoingEventsService:
    """Entry point the host's lifecycle hooks call into."""

    def __init__(self, persist: Optional[Callable[[EventFilterSettings], None]] = None):
        """
        Args:
            persist: Called with the filter settings whenever a hook changed them
        """
        self.persist = persist
        self.session: Optional[EventSession] = None

    def _require_session(self, hook: str) -> EventSession:
        if self.session is None:
            raise SessionNotLoadedError(hook)
        return self.session

    def _persist(self, filter_settings: EventFilterSettings) -> None:
        if self.persist is None:
            return
        try:
            self.persist(filter_settings)
        except Exception as e:
            logger.error("Persisting filter settings failed", error=str(e))

    # ==================== Lifecycle ====================

    def start_session(
        self,
        adapter: SimulationAdapter,
        filter_settings: Optional[EventFilterSettings] = None,
    ) -> Optional[EventSession]:
        """
        Build the session for a newly loaded simulation.

        Runs the one-time legacy blacklist migration and sweeps instance
        filters whose tasks are no longer ongoing.
        """
        self.end_session()

        filter_settings = filter_settings or EventFilterSettings()
        try:
            session = EventSession(adapter, filter_settings)
        except Exception as e:
            logger.error("Opening event session failed", error=str(e))
            return None
        self.session = session

        changed = False
        try:
            changed = migrate_legacy_blacklist(filter_settings, adapter.legacy_blacklist, adapter.type_exists)
            removed = session.policy.sweep_inactive_instances(session.scope_id, adapter.ongoing_task_ids())
            changed = changed or removed > 0
        except Exception as e:
            logger.error("Session maintenance failed", scope_id=session.scope_id, error=str(e))

        if changed:
            self._persist(filter_settings)
        return session

    def end_session(self) -> None:
        if self.session is None:
            return
        try:
            self.session.close()
        except Exception as e:
            logger.warning("Closing event session failed", error=str(e))
        finally:
            self.session = None

    def on_region_finalized(self, region: Optional[Region]) -> None:
        """Prewarm the affinity cache for a new region; dump its situations in dev mode."""
        if region is None:
            return
        try:
            session = self._require_session("on_region_finalized")
            session.affinity.prewarm(session.adapter.tasks(), region)
            if settings.DEV_MODE:
                session.debug_dump(region)
        except EventContextException as e:
            logger.warning("Region finalize hook skipped", **e.to_dict())
        except Exception as e:
            logger.error("Region finalize hook failed", region_id=region.id, error=str(e))

    def on_task_state_changed(self, task_id: Optional[int]) -> None:
        if task_id is None or self.session is None:
            return
        self.session.affinity.invalidate_task(task_id)

    def on_region_removed(self, region_id: Optional[int]) -> None:
        if region_id is None or self.session is None:
            return
        self.session.affinity.invalidate_region(region_id)

    # ==================== Prompt ====================

    def decorate_prompt(self, request: Optional[PromptRequest]) -> Optional[str]:
        """
        Append the ongoing events block to a dialogue prompt.

        Danger is only honoured on home regions. Nothing is delivered when
        no situation survives extraction and filtering.

        Args:
            request: Prompt being built

        Returns:
            The delivered block, or None
        """
        if request is None or request.region is None:
            return None

        try:
            session = self._require_session("decorate_prompt")

            region = request.region
            is_high_danger = request.is_high_danger and region.is_home

            participant_ids = None
            if session.filter_settings.enable_context_filtering:
                participant_ids = collect_participant_ids(request.speakers, request.nearby_provider)

            block = session.build_block(region, participant_ids, is_high_danger)
            if not block:
                return None

            channel = deliver_block(request, block, settings.CONTEXT_CHANNEL_KEY)
            logger.debug("Ongoing events delivered", region_id=region.id, channel=channel, chars=len(block))
            return block

        except EventContextException as e:
            logger.warning("Prompt decoration skipped", **e.to_dict())
            return None
        except Exception as e:
            logger.error("Prompt decoration failed", error=str(e))
            return None


ongoing_events_service = OngoingEventsService()
