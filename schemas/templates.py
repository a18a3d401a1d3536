"""Compression template and generation rule schemas."""

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class CompressionTemplate(BaseModel):
    """An author-defined short replacement for a verbose generated description."""

    source_type_id: str = Field(..., min_length=1, description="Type id the template applies to")
    kind: Optional[str] = Field(
        None, description="Optional kind to disambiguate; empty means any kind"
    )
    compressed_body: str = Field(
        "", description="Replacement text; may contain [token] placeholders"
    )

    model_config = ConfigDict(frozen=True)


class RuleStringEntry(BaseModel):
    """One parsed 'key->output' generation rule line."""

    raw: str = Field(..., description="Original line")
    key: str = Field(..., description="Left side, e.g. 'claimInfo(lodgerCount>=2)'")
    output: str = Field(..., description="Right side: literals and [tokens] in the current language")

    model_config = ConfigDict(frozen=True)


class ExtractionRule(BaseModel):
    """Which dynamic values to recover from a source type's resolved description."""

    source_type_id: str = Field(..., min_length=1)
    kind: Optional[str] = Field(None, description="Only apply to snapshots of this kind")
    description_rule_key: str = Field(
        "questDescription",
        description="Key prefix of the rule whose output pattern anchors the sliced tokens",
    )
    anchored_tokens: Tuple[str, ...] = Field(
        (), description="Tokens recovered by slicing between their neighbouring literals"
    )
    clause_tokens: Tuple[str, ...] = Field(
        (), description="Tokens recovered by matching rule alternatives keyed by the token name"
    )

    model_config = ConfigDict(frozen=True)


DEFAULT_EXTRACTION_RULES: Tuple[ExtractionRule, ...] = (
    ExtractionRule(
        source_type_id="Hospitality_Refugee",
        kind="Task",
        anchored_tokens=("questDurationTicks_duration",),
        clause_tokens=("claimInfo",),
    ),
)
