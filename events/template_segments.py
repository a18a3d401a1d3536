"""
Bracket-token template parsing.

Generation rule outputs and compact templates share one micro-language:
literal text with [token] placeholders. This module parses it once into
Literal/Token segments and offers the three operations built on top:

- neighbour_literals(): literals immediately around a token, used to slice
  a generated value out of resolved text
- wildcard_pattern(): regex with escaped literals and a lazy wildcard per
  token, used to recognise which rule alternative produced some text
- render(): substitute known token values, leaving unknown tokens verbatim
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from core import TemplateParseError

TOKEN_WILDCARD = "(.+?)"


@dataclass(frozen=True)
class Segment:
    """Either a literal run of text or a [token] placeholder."""

    text: str
    is_token: bool = False

    def source(self) -> str:
        """The segment as it appeared in the template."""
        return f"[{self.text}]" if self.is_token else self.text


def parse_segments(template: Optional[str]) -> List[Segment]:
    """
    Split a template into literal and token segments.

    An opening bracket without a closing one makes the rest of the template
    literal text.

    Args:
        template: Text such as "[claimInfo] The job will take [duration]."

    Returns:
        Segments in order; empty for empty input
    """
    if not template:
        return []

    segments: List[Segment] = []
    literal: List[str] = []
    i = 0
    length = len(template)

    while i < length:
        char = template[i]
        if char != "[":
            literal.append(char)
            i += 1
            continue

        if literal:
            segments.append(Segment("".join(literal)))
            literal = []

        end = template.find("]", i + 1)
        if end < 0:
            segments.append(Segment(template[i:]))
            break

        segments.append(Segment(template[i + 1:end], is_token=True))
        i = end + 1

    if literal:
        segments.append(Segment("".join(literal)))

    return segments


def neighbour_literals(segments: List[Segment], token: str) -> Tuple[str, str]:
    """
    Nearest non-empty literals before and after the first occurrence of a token.

    Raises:
        TemplateParseError: If the token is absent or lacks a literal on either side
    """
    template = "".join(s.source() for s in segments)

    index = next(
        (i for i, s in enumerate(segments) if s.is_token and s.text == token),
        -1,
    )
    if index < 0:
        raise TemplateParseError(template, f"token [{token}] not present")

    before = next(
        (s.text for s in reversed(segments[:index]) if not s.is_token and s.text),
        None,
    )
    after = next(
        (s.text for s in segments[index + 1:] if not s.is_token and s.text),
        None,
    )
    if not before or not after:
        raise TemplateParseError(template, f"token [{token}] is not enclosed by literals")
    return before, after


def slice_between(text: str, before: str, after: str) -> Optional[str]:
    """
    Text between the first occurrence of `before` and the next `after`.

    Returns None when either anchor is missing or nothing lies between them.
    """
    if not text or not before or not after:
        return None

    idx_before = text.find(before)
    if idx_before < 0:
        return None

    start = idx_before + len(before)
    if start >= len(text):
        return None

    idx_after = text.find(after, start)
    if idx_after <= start:
        return None

    return text[start:idx_after]


def wildcard_pattern(segments: List[Segment]) -> re.Pattern:
    """
    Compile a regex matching any text the template could have produced.

    Raises:
        TemplateParseError: If the template has no segments
        re.error: If the resulting pattern cannot be compiled
    """
    if not segments:
        raise TemplateParseError("", "empty template")

    pattern = "".join(
        TOKEN_WILDCARD if s.is_token else re.escape(s.text)
        for s in segments
        if s.is_token or s.text
    )
    return re.compile(pattern, re.DOTALL)


def render(segments: List[Segment], values: Dict[str, str]) -> str:
    """Substitute tokens that have a non-empty value; keep the rest as [token]."""
    parts = []
    for segment in segments:
        if segment.is_token and values.get(segment.text):
            parts.append(values[segment.text])
        else:
            parts.append(segment.source())
    return "".join(parts)
