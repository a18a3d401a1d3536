"""
Fixed text used in the ongoing events block appended to dialogue prompts.

The dialogue model sees these verbatim, so they stay short and stable.
"""

BLOCK_HEADER = "[Ongoing events]"
BLOCK_FOOTER = "[Event list end]"
NO_TITLE = "(no title)"
BODY_INDENT = "   "
TRUNCATION_SUFFIX = "..."

CURRENT_LOCATION_PREFIX = "[current location] "
CHARACTERS_SEPARATOR = " | characters: "

ACCEPTED_JUST_NOW = "accepted just now"
ACCEPTED_ONE_HOUR = "accepted ~1 hour ago"
ACCEPTED_HOURS = "accepted ~{hours} hours ago"
ACCEPTED_DAYS = "accepted ~{days} days ago"
