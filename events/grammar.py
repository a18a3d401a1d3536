"""
Generation rule strings.

Hosts expose description grammars as raw "key->output" lines in the current
language, e.g. "questDescription->[approachInfo][claimInfo]...". Reading the
outputs lets the compressor find where generated values sit in resolved
text without re-implementing the grammar.
"""

from typing import Iterable, List, Optional

from schemas.templates import RuleStringEntry

RULE_ARROW = "->"


def parse_rule_strings(raw_lines: Optional[Iterable[str]]) -> List[RuleStringEntry]:
    """
    Parse raw rule lines into entries.

    Lines without an arrow, or with an empty key or output, are skipped.
    The output keeps its whitespace since it may start or end with literals.
    """
    entries: List[RuleStringEntry] = []
    if not raw_lines:
        return entries

    for raw in raw_lines:
        if not raw or not isinstance(raw, str):
            continue
        arrow = raw.find(RULE_ARROW)
        if arrow < 0:
            continue
        key = raw[:arrow].strip()
        output = raw[arrow + len(RULE_ARROW):]
        if not key or not output:
            continue
        entries.append(RuleStringEntry(raw=raw, key=key, output=output))

    return entries


def first_output_with_prefix(entries: List[RuleStringEntry], key_prefix: str) -> Optional[str]:
    """Output of the first rule whose key starts with key_prefix (covers conditional variants)."""
    for entry in entries:
        if entry.key.startswith(key_prefix):
            return entry.output
    return None


def outputs_with_prefix(entries: List[RuleStringEntry], key_prefix: str) -> List[str]:
    """Outputs of every rule alternative whose key starts with key_prefix."""
    return [entry.output for entry in entries if entry.key.startswith(key_prefix)]
