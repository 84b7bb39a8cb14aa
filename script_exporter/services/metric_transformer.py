"""Turn raw script output into exposition-format lines.

Each output line is one of:

  blank       skipped
  # ...       directive (HELP/TYPE/comment), passed through verbatim and
              never prefixed
  otherwise   sample candidate: the prefix is prepended, then the line
              must parse as ``name{labels} value``

Parsing a sample is two explicit stages:

  1. tokenize ``name{labels}`` plus the whitespace that follows it
  2. normalize a decimal comma in the value and check it is numeric

A line failing either stage is dropped.  Nothing about a dropped line is
reported to the probe caller; the count is returned so the handler can
publish it as a self-metric.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal

LineKind = Literal["directive", "sample"]

_NAME_RE = re.compile(r"[a-zA-Z_:][a-zA-Z0-9_:]*")
# float or integer, NaN/Inf, then an optional millisecond timestamp.
# ASCII digits and blanks only.
_VALUE_RE = re.compile(
    r"(?:[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?|[-+]?Inf|NaN)(?:[ \t]+-?\d+)?",
    re.ASCII,
)
_BLANKS = " \t"


@dataclass(frozen=True, slots=True)
class MetricLine:
    kind: LineKind
    text: str


@dataclass(slots=True)
class TransformResult:
    lines: list[MetricLine] = field(default_factory=list)
    dropped: int = 0

    @property
    def text(self) -> str:
        return "".join(f"{line.text}\n" for line in self.lines)


def _label_set_end(line: str, start: int) -> int | None:
    """Index just past the ``}`` closing the label set opened at *start*.

    Braces inside quoted label values don't count.
    """
    in_quotes = False
    escaped = False
    for i in range(start + 1, len(line)):
        ch = line[i]
        if escaped:
            escaped = False
        elif in_quotes and ch == "\\":
            escaped = True
        elif ch == '"':
            in_quotes = not in_quotes
        elif ch == "}" and not in_quotes:
            return i + 1
    return None


def split_sample(line: str) -> tuple[str, str] | None:
    """Split a sample into its ``name{labels}<ws>`` segment and its value.

    Returns None when the line has no metric name, no label set, or no
    whitespace between the label set and the value.
    """
    match = _NAME_RE.match(line)
    if match is None:
        return None

    brace = match.end()
    if brace >= len(line) or line[brace] != "{":
        return None

    end = _label_set_end(line, brace)
    if end is None:
        return None

    value_start = end
    while value_start < len(line) and line[value_start] in _BLANKS:
        value_start += 1
    if value_start == end:
        return None

    return line[:value_start], line[value_start:]


def parse_sample(line: str) -> MetricLine | None:
    parts = split_sample(line)
    if parts is None:
        return None

    segment, value = parts
    value = value.replace(",", ".")
    if not _VALUE_RE.fullmatch(value):
        return None

    return MetricLine("sample", segment + value)


def transform_output(raw: str, prefix: str = "") -> TransformResult:
    """Filter and prefix *raw* script output, preserving line order."""
    result = TransformResult()
    for raw_line in raw.split("\n"):
        line = raw_line.strip(_BLANKS + "\r")
        if not line:
            continue

        if line.startswith("#"):
            result.lines.append(MetricLine("directive", line))
            continue

        sample = parse_sample(prefix + line)
        if sample is None:
            result.dropped += 1
            continue
        result.lines.append(sample)

    return result
