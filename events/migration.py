"""
One-time legacy blacklist migration.

Older versions hid task types through a fixed blacklist shipped as host
definitions. Those type ids are folded once into the user-editable global
type filter. The migration never runs twice: even when it fails, the done
flag is set so a broken definition does not fail again on every load.
"""

from typing import Callable, Iterable, List, Tuple, Union

from core import MigrationError, get_logger
from schemas.filter_settings import EventFilterSettings

logger = get_logger(__name__)

LegacyEntries = Union[Iterable[str], Callable[[], Iterable[str]]]


def _fold_legacy_entries(
    settings: EventFilterSettings,
    legacy_entries: LegacyEntries,
    type_exists: Callable[[str], bool],
) -> Tuple[List[str], List[str]]:
    migrated: List[str] = []
    skipped: List[str] = []

    try:
        entries = legacy_entries() if callable(legacy_entries) else legacy_entries
        for type_id in entries or ():
            if not type_id:
                continue
            if type_exists(type_id):
                settings.disabled_type_ids.add(type_id)
                migrated.append(type_id)
            else:
                skipped.append(type_id)
    except Exception as e:
        raise MigrationError(details=str(e)) from e

    return migrated, skipped


def migrate_legacy_blacklist(
    settings: EventFilterSettings,
    legacy_entries: LegacyEntries,
    type_exists: Callable[[str], bool],
) -> bool:
    """
    Copy legacy blacklisted type ids that still exist into the global type filter.

    Args:
        settings: Filter settings to update
        legacy_entries: Legacy type ids, or a callable returning them
        type_exists: Whether a type id is known to the loaded host

    Returns:
        True if settings changed and should be persisted
    """
    if settings.legacy_blacklist_migrated:
        return False

    try:
        migrated, skipped = _fold_legacy_entries(settings, legacy_entries, type_exists)
    except MigrationError as e:
        logger.error("Legacy blacklist migration failed", **e.to_dict())
        settings.legacy_blacklist_migrated = True
        return True

    settings.legacy_blacklist_migrated = True

    if migrated or skipped:
        logger.info(
            "Legacy blacklist migrated",
            migrated=migrated,
            skipped_unknown=skipped,
        )
    else:
        logger.info("Legacy blacklist migration found no entries")

    return True
