from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable


log = logging.getLogger("sitelang.tokenizer")

TAG_SPLIT_RE = re.compile(r"(<[^>]+>)")
SUPPRESS_OPEN_RE = re.compile(r"^<\s*(script|style)\b", re.IGNORECASE)
SUPPRESS_CLOSE_RE = re.compile(r"^<\s*/\s*(script|style)\b", re.IGNORECASE)

Splitter = Callable[[str], list[str]]


class SegmentKind(Enum):
    MARKUP = "markup"
    TEXT = "text"


@dataclass(frozen=True)
class Segment:
    text: str
    kind: SegmentKind
    eligible: bool


def _regex_split(html: str) -> list[str]:
    return TAG_SPLIT_RE.split(html)


def split_html(html: str, splitter: Splitter | None = None) -> list[Segment]:
    """Split a document into markup and text segments.

    Text inside <script> and <style> is kept but marked ineligible. When the
    input cannot be split, the whole document comes back as one eligible text
    segment.
    """
    if not html:
        return [Segment(html or "", SegmentKind.TEXT, True)]

    try:
        parts = (splitter or _regex_split)(html)
    except Exception as exc:
        log.warning("html splitter failed, using single segment: %s", exc)
        parts = []
    if not parts or len(parts) < 2 or "".join(parts) != html:
        return [Segment(html, SegmentKind.TEXT, True)]

    segments: list[Segment] = []
    suppressed_by: str | None = None
    for part in parts:
        if not part:
            continue
        if part.startswith("<"):
            segments.append(Segment(part, SegmentKind.MARKUP, False))
            if suppressed_by is None:
                opening = SUPPRESS_OPEN_RE.match(part)
                if opening and not part.rstrip(">").rstrip().endswith("/"):
                    suppressed_by = opening.group(1).lower()
            else:
                closing = SUPPRESS_CLOSE_RE.match(part)
                if closing and closing.group(1).lower() == suppressed_by:
                    suppressed_by = None
            continue
        segments.append(Segment(part, SegmentKind.TEXT, suppressed_by is None))
    return segments


def join_segments(segments: Iterable[Segment]) -> str:
    return "".join(seg.text for seg in segments)


def markup_texts(segments: Iterable[Segment]) -> list[str]:
    return [seg.text for seg in segments if seg.kind is SegmentKind.MARKUP]
