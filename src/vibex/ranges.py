"""Character range restriction.

``trim`` ranges keep characters, ``cut`` ranges drop them. Both are inclusive
``"start-end"`` strings where ``s``/``*`` stand for the first character and
``e``/``*`` for the last one of the content they are applied to.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vibex.logging import logger

if TYPE_CHECKING:
    from collections.abc import Sequence

RANGE_PATTERN = re.compile(r"^(s|\*|\d+)-(e|\*|\d+)$")
_STRIP_CHARS = re.compile(r"['\"()]")


class RangeSpec(BaseModel):
    """A validated inclusive range of character offsets."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)

    def slice_of(self, content: str) -> str:
        return content[self.start : self.end + 1]


class RangeOptions(BaseModel):
    """Raw trim and cut range strings, resolved against content when applied."""

    model_config = ConfigDict(frozen=True)

    trim: tuple[str, ...] = ()
    cut: tuple[str, ...] = ()

    @field_validator("trim", "cut", mode="before")
    @classmethod
    def _as_tuple(cls, value: object) -> object:
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        return value

    @property
    def is_empty(self) -> bool:
        return not self.trim and not self.cut


def parse_range(raw: str, length: int) -> RangeSpec | None:
    """Resolve a ``"start-end"`` string against a content length.

    Args:
        raw (str): the range expression, e.g. "s-200", "10-e" or "*-*"
        length (int): the length of the content the range applies to

    Returns:
        RangeSpec | None: the resolved range, or None (with a warning logged) when the
            expression is malformed or falls outside ``[0, length - 1]``
    """
    clean = _STRIP_CHARS.sub("", raw.strip())
    match = RANGE_PATTERN.match(clean)
    if match is None:
        logger.warning("Invalid range: %s (expected start-end, e.g. s-200 or 10-e)", clean)
        return None
    start_str, end_str = match.groups()
    start = 0 if start_str in {"s", "*"} else int(start_str)
    end = length - 1 if end_str in {"e", "*"} else int(end_str)
    if start < 0 or end >= length or start > end:
        logger.warning(
            "Invalid range: %s (converted to %d-%d, content length: %d)",
            clean,
            start,
            end,
            length,
        )
        return None
    return RangeSpec(start=start, end=end)


def parse_ranges(raws: Sequence[str], length: int) -> list[RangeSpec]:
    specs: list[RangeSpec] = []
    for raw in raws:
        spec = parse_range(raw, length)
        if spec is not None:
            specs.append(spec)
    return specs


def trim_content(content: str, raws: Sequence[str]) -> str:
    """Keep only the characters inside the trim ranges.

    Slices are taken from the original content and concatenated in the order the
    ranges were given, so overlapping ranges repeat the shared characters.
    """
    return "".join(spec.slice_of(content) for spec in parse_ranges(raws, len(content)))


def cut_content(content: str, raws: Sequence[str]) -> str:
    """Remove the characters inside the cut ranges.

    Ranges are removed from the highest start offset down so earlier removals do
    not shift the ranges still to go. Overlapping ranges get best-effort results:
    offsets past the shrunken content are clamped by slicing.
    """
    specs = sorted(parse_ranges(raws, len(content)), key=lambda spec: spec.start, reverse=True)
    result = content
    for spec in specs:
        result = result[: spec.start] + result[spec.end + 1 :]
    return result


def apply_ranges(content: str, options: RangeOptions) -> str:
    """Apply trim ranges, then cut ranges, to `content`.

    Args:
        content (str): the text to restrict
        options (RangeOptions): the trim and cut range strings

    Returns:
        str: the restricted text, or `content` itself when no range is given
    """
    result = content
    if options.trim:
        result = trim_content(result, options.trim)
    if options.cut:
        result = cut_content(result, options.cut)
    return result
