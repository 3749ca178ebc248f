from datetime import datetime, timezone
from typing import Optional, Dict, Any, List, Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator
import json


class SourceSpan(BaseModel):
    """Character range [start, end) in the source text, plus the 1-based line and 0-based column of start."""
    model_config = ConfigDict(frozen=True)

    start: int
    end: int
    line: int = 1
    column: int = 0


class Patch(BaseModel):
    """
    A suggested textual edit attached to a Finding.

    `replace_value` swaps the value text of one attribute; `remove_element`
    deletes the whole element, optionally together with its enclosing line.
    `span` is the resolved range when the node carried source positions.
    """
    model_config = ConfigDict(frozen=True)

    message_id: str
    message: str
    action: Literal["replace_value", "remove_element"]
    attribute: Optional[str] = None
    replacement: str = ""
    include_line: bool = False
    automatic: bool = False
    span: Optional[SourceSpan] = None

    def apply(self, source: str) -> str:
        """Returns `source` with this patch spliced in."""
        if self.span is None:
            raise ValueError(f"Patch '{self.message_id}' has no resolved source range")

        start, end = self.span.start, self.span.end
        if self.action == "remove_element":
            if self.include_line:
                start, end = self._line_bounds(source, start, end)
            return source[:start] + source[end:]

        return source[:start] + self.replacement + source[end:]

    @staticmethod
    def _line_bounds(source: str, start: int, end: int):
        """
        Widens [start, end) over the indentation before it and the line break
        after it, but only across whitespace; sibling markup is never touched.
        """
        line_start = start
        while line_start > 0 and source[line_start - 1] in " \t":
            line_start -= 1
        if line_start > 0 and source[line_start - 1] != "\n":
            return start, end

        line_end = end
        while line_end < len(source) and source[line_end] in " \t\r":
            line_end += 1
        if line_end < len(source) and source[line_end] == "\n":
            return line_start, line_end + 1
        if line_end == len(source):
            return line_start, line_end
        return start, end


class Issue(BaseModel):
    """A single warning produced by a pure validator, before it is bound to a rule."""
    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)


class Finding(BaseModel):
    """
    Data model representing a single diagnostic reported for a head element.
    Severity is left empty by the rules and assigned by the engine from the preset.
    """
    # Classification
    rule: str  # e.g., 'valid-charset', 'head-element-order'
    code: str  # e.g., 'duplicateCharset', 'wrongOrder', 'expiredToken'
    tag: str  # e.g., 'meta', 'link', 'head'
    severity: Optional[str] = None  # 'error', 'warn'

    # Content
    message: str  # Human-readable description of the issue
    data: Dict[str, Any] = Field(default_factory=dict)
    span: Optional[SourceSpan] = None
    patches: List[Patch] = Field(default_factory=list)

    @field_validator('data', mode='before')
    @classmethod
    def parse_data(cls, v: Any) -> Dict[str, Any]:
        """
        Ensures the 'data' field is a dictionary.
        Automatically parses JSON strings, e.g. when findings are reloaded from an export.
        """
        if isinstance(v, str):
            try:
                return json.loads(v)
            except (json.JSONDecodeError, TypeError):
                return {}
        return v or {}

    @property
    def fix(self) -> Optional[Patch]:
        """The patch a host may apply without asking, if any."""
        return next((p for p in self.patches if p.automatic), None)


class AuditOptions(BaseModel):
    """
    Options consumed by the rules during an audit.
    `now` pins the reference time for token expiry checks; a naive value is taken as UTC.
    """
    expected_origin: Optional[str] = None
    now: Optional[datetime] = None

    @field_validator('now')
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v
