"""
Event text compression.

Generated task descriptions are long. When an author has written a compact
template for a source type, the description is replaced by that template,
with dynamic facts (who, what, how long) recovered from the resolved text
and substituted into its tokens.

Recovering a value never re-implements the host's grammar. Instead the
engine reads the grammar's own output patterns for the current language:

- anchored tokens: find the literals around the token in the description
  rule and slice the resolved text between them
- clause tokens: turn every rule alternative for the token into a regex
  (escaped literals, lazy wildcard per token) and keep the longest match

Each step fails on its own. A step that cannot run leaves its token
unresolved; a missing template leaves the body untouched. Nothing here
raises to the caller.
"""

import re
from typing import Callable, Dict, Iterable, List, Optional

from core import RuleLookupError, TemplateException, get_logger
from events.grammar import first_output_with_prefix, outputs_with_prefix, parse_rule_strings
from events.template_segments import (
    neighbour_literals,
    parse_segments,
    render,
    slice_between,
    wildcard_pattern,
)
from schemas.snapshot import SituationSnapshot
from schemas.templates import (
    CompressionTemplate,
    DEFAULT_EXTRACTION_RULES,
    ExtractionRule,
    RuleStringEntry,
)

logger = get_logger(__name__)

RuleSource = Callable[[str], Optional[List[str]]]


def _same(a: Optional[str], b: Optional[str]) -> bool:
    return (a or "").lower() == (b or "").lower()


class TemplateRegistry:
    """Compact templates indexed by source type id (case-insensitive)."""

    def __init__(self, templates: Iterable[CompressionTemplate] = ()):
        self._by_source: Dict[str, List[CompressionTemplate]] = {}
        for template in templates:
            self._by_source.setdefault(template.source_type_id.lower(), []).append(template)

    def __len__(self) -> int:
        return sum(len(v) for v in self._by_source.values())

    def lookup(self, source_type_id: Optional[str], kind: Optional[str]) -> Optional[CompressionTemplate]:
        """
        Find the template for a source type and kind.

        A template with a matching kind wins; otherwise the first template
        without a kind is the fallback. Never more than one result.
        """
        if not source_type_id:
            return None

        fallback = None
        for template in self._by_source.get(source_type_id.lower(), []):
            if not template.kind:
                if fallback is None:
                    fallback = template
                continue
            if _same(template.kind, kind):
                return template
        return fallback


class CompressionEngine:
    """Rewrites verbose snapshot bodies into their compact templated form."""

    def __init__(
        self,
        templates: TemplateRegistry,
        rule_source: RuleSource,
        extraction_rules: Iterable[ExtractionRule] = DEFAULT_EXTRACTION_RULES,
    ):
        """
        Args:
            templates: Compact templates for this session
            rule_source: Returns raw description rule lines for a source type
            extraction_rules: Source types whose dynamic values are recovered
        """
        self.templates = templates
        self.rule_source = rule_source
        self.extraction_rules = list(extraction_rules)

    def compress(self, snapshot: SituationSnapshot) -> str:
        """
        Compressed body for a snapshot, or its base body when no template applies.

        Args:
            snapshot: Situation to compress

        Returns:
            Compact text; the unmodified base body on any failure
        """
        base_body = snapshot.base_body
        if not base_body:
            return base_body

        if not snapshot.source_type_id:
            return base_body

        values = self.extract_values(snapshot, base_body)

        template = self.templates.lookup(snapshot.source_type_id, snapshot.kind)
        if template is None or not template.compressed_body:
            return base_body

        compressed = render(parse_segments(template.compressed_body), values)
        return compressed or base_body

    def extract_values(self, snapshot: SituationSnapshot, resolved: str) -> Dict[str, str]:
        """Recover dynamic token values from resolved text; tokens that fail are omitted."""
        rule = self._rule_for(snapshot)
        if rule is None:
            return {}

        entries = self._rule_entries(rule.source_type_id)
        if not entries:
            return {}

        values: Dict[str, str] = {}

        for token in rule.anchored_tokens:
            try:
                value = self._extract_anchored(rule, entries, token, resolved)
            except TemplateException as e:
                logger.debug("Anchored extraction skipped", token=token, **e.context)
                continue
            if value:
                values[token] = value

        for token in rule.clause_tokens:
            value = self._extract_clause(entries, token, resolved)
            if value:
                values[token] = value

        return values

    def _rule_for(self, snapshot: SituationSnapshot) -> Optional[ExtractionRule]:
        for rule in self.extraction_rules:
            if not _same(rule.source_type_id, snapshot.source_type_id):
                continue
            if rule.kind and not _same(rule.kind, snapshot.kind):
                continue
            return rule
        return None

    def _rule_entries(self, source_type_id: str) -> List[RuleStringEntry]:
        try:
            raw_lines = self.rule_source(source_type_id)
        except Exception as e:
            logger.warning("Reading description rules failed", source_type_id=source_type_id, error=str(e))
            return []
        return parse_rule_strings(raw_lines)

    def _extract_anchored(
        self,
        rule: ExtractionRule,
        entries: List[RuleStringEntry],
        token: str,
        resolved: str,
    ) -> Optional[str]:
        """Slice the value of `token` out of resolved text using its neighbouring literals."""
        output = first_output_with_prefix(entries, rule.description_rule_key)
        if output is None:
            raise RuleLookupError(rule.source_type_id, rule.description_rule_key)

        before, after = neighbour_literals(parse_segments(output), token)
        value = slice_between(resolved, before, after)
        return value.strip() if value else None

    def _extract_clause(self, entries: List[RuleStringEntry], token: str, resolved: str) -> Optional[str]:
        """Longest span of resolved text produced by any rule alternative for `token`."""
        best = None
        for output in outputs_with_prefix(entries, token):
            try:
                pattern = wildcard_pattern(parse_segments(output))
            except (TemplateException, re.error) as e:
                logger.debug("Clause pattern skipped", token=token, error=str(e))
                continue

            match = pattern.search(resolved)
            if match and len(match.group(0)) > len(best or ""):
                best = match.group(0)

        return best.strip() if best else None
