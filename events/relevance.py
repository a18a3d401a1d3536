"""
Conversation relevance filtering.

Narrows an extraction to what matters for the characters actually talking,
saving prompt budget. Only tasks are narrowed:

- threats, conditions and site features always pass
- tasks with no directly associated actors always pass
- tasks with actors pass only if one of them takes part in the conversation

With no known participants everything passes.
"""

from typing import Callable, Dict, Iterable, List, Optional, Set

from core import get_logger
from schemas.snapshot import SituationSnapshot, TASK_KIND
from simulation.adapter import SimulationAdapter
from simulation.models import Actor, Task

logger = get_logger(__name__)

NearbyProvider = Callable[[], Iterable[Actor]]


def collect_participant_ids(
    speakers: Optional[Iterable[Optional[Actor]]],
    nearby_provider: Optional[NearbyProvider] = None,
) -> Set[int]:
    """
    Ids of every actor taking part in or overhearing a conversation.

    Args:
        speakers: Actors passed with the prompt request (speaker, recipient...)
        nearby_provider: Optional callable listing actors near the speakers;
            failures are ignored

    Returns:
        Set of actor ids
    """
    ids: Set[int] = set()

    for actor in speakers or ():
        if actor is not None:
            ids.add(actor.id)

    if nearby_provider is not None:
        try:
            for actor in nearby_provider() or ():
                if actor is not None:
                    ids.add(actor.id)
        except Exception as e:
            logger.debug("Nearby actor lookup failed", error=str(e))

    return ids


class ContextRelevanceFilter:
    """Drops task snapshots unrelated to the conversation's participants."""

    def __init__(self, adapter: SimulationAdapter):
        self.adapter = adapter

    def filter(
        self,
        snapshots: List[SituationSnapshot],
        participant_ids: Optional[Set[int]],
    ) -> List[SituationSnapshot]:
        """
        Keep the snapshots relevant to the participants.

        Args:
            snapshots: Extracted snapshots, in order
            participant_ids: Actor ids in the conversation; empty keeps everything

        Returns:
            Filtered snapshots, order preserved
        """
        if not snapshots or not participant_ids:
            return snapshots

        ongoing = [task for task in self.adapter.tasks() if task is not None and task.is_ongoing]
        by_id: Dict[str, Task] = {str(task.id): task for task in ongoing if task.id is not None}

        kept = [s for s in snapshots if self._is_relevant(s, participant_ids, ongoing, by_id)]

        if len(kept) != len(snapshots):
            logger.debug(
                "Snapshots narrowed to conversation",
                before=len(snapshots),
                after=len(kept),
                participants=len(participant_ids),
            )
        return kept

    def _is_relevant(
        self,
        snapshot: SituationSnapshot,
        participant_ids: Set[int],
        ongoing: List[Task],
        by_id: Dict[str, Task],
    ) -> bool:
        if snapshot.is_threat or snapshot.kind != TASK_KIND:
            return True

        task = self.match_task(snapshot, ongoing, by_id)
        if task is None:
            return True

        actors = task.actors()
        if not actors:
            return True

        return any(actor.id in participant_ids for actor in actors)

    @staticmethod
    def match_task(
        snapshot: SituationSnapshot,
        ongoing: List[Task],
        by_id: Dict[str, Task],
    ) -> Optional[Task]:
        """Live task a snapshot was extracted from: by instance id, else by type and label prefix."""
        if snapshot.instance_id:
            task = by_id.get(snapshot.instance_id)
            if task is not None:
                return task

        for task in ongoing:
            if not task.root_type or task.root_type != snapshot.source_type_id:
                continue
            if snapshot.label and snapshot.label.startswith(task.label):
                return task
        return None
