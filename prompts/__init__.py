"""
Prompts module - fixed text fragments of the ongoing events block.

Import directly:
    from prompts import BLOCK_HEADER, BLOCK_FOOTER
"""

from prompts.ongoing_events import (
    BLOCK_HEADER,
    BLOCK_FOOTER,
    NO_TITLE,
    BODY_INDENT,
    TRUNCATION_SUFFIX,
    CURRENT_LOCATION_PREFIX,
    CHARACTERS_SEPARATOR,
    ACCEPTED_JUST_NOW,
    ACCEPTED_ONE_HOUR,
    ACCEPTED_HOURS,
    ACCEPTED_DAYS,
)

__all__ = [
    "BLOCK_HEADER",
    "BLOCK_FOOTER",
    "NO_TITLE",
    "BODY_INDENT",
    "TRUNCATION_SUFFIX",
    "CURRENT_LOCATION_PREFIX",
    "CHARACTERS_SEPARATOR",
    "ACCEPTED_JUST_NOW",
    "ACCEPTED_ONE_HOUR",
    "ACCEPTED_HOURS",
    "ACCEPTED_DAYS",
]
