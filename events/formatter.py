"""
Ongoing events block formatting.

Pure: the same snapshots and compressor always give the same text.
"""

import re
from typing import Callable, List, Optional

from prompts.ongoing_events import (
    BLOCK_FOOTER,
    BLOCK_HEADER,
    BODY_INDENT,
    NO_TITLE,
    TRUNCATION_SUFFIX,
)
from schemas.snapshot import SituationSnapshot

Compressor = Callable[[SituationSnapshot], str]

# Rich-text tags the host embeds in labels and descriptions
_MARKUP_TAG = re.compile(r"</?(?:color|b|i|u|size)\b[^>]*>", re.IGNORECASE)


def strip_markup(text: Optional[str]) -> str:
    """Remove color and simple inline formatting tags."""
    if not text:
        return ""
    return _MARKUP_TAG.sub("", text)


def _entry_body(snapshot: SituationSnapshot, compressor: Optional[Compressor]) -> str:
    body = snapshot.base_body
    if compressor is not None and snapshot.source_type_id:
        compressed = compressor(snapshot)
        if compressed:
            body = compressed
    return strip_markup(body)


def format_events_block(
    snapshots: Optional[List[SituationSnapshot]],
    max_chars: int = 2000,
    compressor: Optional[Compressor] = None,
    body_max_chars: int = 600,
) -> str:
    """
    Assemble the text block appended to a dialogue prompt.

    Entries are numbered from 1. Once the text exceeds max_chars no further
    entry is started; the closing marker is always written.

    Args:
        snapshots: Situations in priority order
        max_chars: Soft character budget
        compressor: Optional callable returning a compact body for a snapshot
        body_max_chars: Bodies longer than this are cut and end with "..."

    Returns:
        The block, header and end markers included
    """
    lines = [BLOCK_HEADER]
    length = len(BLOCK_HEADER) + 1

    for index, snapshot in enumerate(snapshots or [], start=1):
        if length > max_chars:
            break

        label = strip_markup(snapshot.label) or NO_TITLE
        entry = ["", f"{index}) {label}"]

        body = _entry_body(snapshot, compressor)
        if body:
            if len(body) > body_max_chars:
                body = body[:body_max_chars] + TRUNCATION_SUFFIX
            entry.append(BODY_INDENT + body.replace("\n", "\n" + BODY_INDENT))

        lines.extend(entry)
        length += sum(len(line) + 1 for line in entry)

    lines.extend(["", BLOCK_FOOTER])
    return "\n".join(lines) + "\n"
