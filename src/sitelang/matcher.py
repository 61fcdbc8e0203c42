from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from html.entities import codepoint2name
from typing import Iterable, Sequence

from .text import normalize_for_prefix


log = logging.getLogger("sitelang.matcher")

WHITESPACE_CLASS = r"(?:\s|&nbsp;|&#0*160;|&#[xX]0*[aA]0;)+"

# Characters that render identically (or are swapped by typographic filters)
# and may appear literally or entity-encoded in rendered HTML.
EQUIVALENT_CHARS: tuple[str, ...] = (
    "'’‘′",
    '"“”″',
    "-–—",
    "&",
    "•",
    "…",
)
EXTRA_NAMED_ENTITIES = {"'": ("apos",)}
# Spelled-out forms that are not entities.
EXTRA_LITERALS = {"…": ("...",)}


def _entity_forms(ch: str) -> list[str]:
    code = ord(ch)
    forms = [rf"&#0*{code};", rf"(?i:&#x0*{code:x};)"]
    names = []
    if code in codepoint2name:
        names.append(codepoint2name[code])
    names.extend(EXTRA_NAMED_ENTITIES.get(ch, ()))
    forms.extend(f"&{name};" for name in names)
    return forms


def _build_alternations() -> dict[str, str]:
    table: dict[str, str] = {}
    for group in EQUIVALENT_CHARS:
        options: list[str] = []
        for ch in group:
            options.extend(_entity_forms(ch))
            options.extend(re.escape(lit) for lit in EXTRA_LITERALS.get(ch, ()))
        for ch in group:
            options.append(re.escape(ch))
        alternation = "(?:" + "|".join(options) + ")"
        for ch in group:
            table[ch] = alternation
    return table


ALTERNATIONS = _build_alternations()


@dataclass(frozen=True)
class MatchCandidate:
    search_text: str
    normalized_search: str
    replacement: str
    byte_length: int
    pattern: re.Pattern[str] | None
    priority: int


@dataclass(frozen=True)
class MatchInterval:
    start: int
    end: int
    replacement: str
    priority: int

    @property
    def weight(self) -> int:
        return self.end - self.start


@lru_cache(maxsize=4096)
def build_fuzzy_pattern(search_text: str) -> re.Pattern[str] | None:
    """Compile a pattern tolerant to whitespace runs and entity encodings.

    Returns None when the text holds nothing that could be rendered
    differently, in which case only exact matching applies.
    """
    if not search_text:
        return None
    parts: list[str] = []
    fuzzy = False
    in_space = False
    for ch in search_text:
        if ch.isspace():
            if not in_space:
                parts.append(WHITESPACE_CLASS)
                in_space = True
            fuzzy = True
            continue
        in_space = False
        alternation = ALTERNATIONS.get(ch)
        if alternation is not None:
            parts.append(alternation)
            fuzzy = True
        else:
            parts.append(re.escape(ch))
    if not fuzzy:
        return None
    return re.compile("".join(parts))


def make_candidate(search_text: str, replacement: str, priority: int) -> MatchCandidate:
    normalized, _ = normalize_for_prefix(search_text)
    try:
        pattern = build_fuzzy_pattern(search_text)
    except re.error as exc:
        log.warning("fuzzy pattern failed for %r: %s", search_text[:60], exc)
        pattern = None
    return MatchCandidate(
        search_text=search_text,
        normalized_search=normalized,
        replacement=replacement,
        byte_length=len(search_text.encode("utf-8")),
        pattern=pattern,
        priority=priority,
    )


def _exact_spans(text: str, needle: str) -> Iterable[tuple[int, int]]:
    start = text.find(needle)
    while start != -1:
        yield start, start + len(needle)
        start = text.find(needle, start + 1)


def protected_spans(text: str, protected: Iterable[str]) -> list[tuple[int, int]]:
    spans: list[tuple[int, int]] = []
    for token in protected:
        if not token:
            continue
        start = text.find(token)
        while start != -1:
            spans.append((start, start + len(token)))
            start = text.find(token, start + len(token))
    return spans


def _cuts_protected(start: int, end: int, spans: Sequence[tuple[int, int]]) -> bool:
    return any(s < start < e or s < end < e for s, e in spans)


def find_intervals(
    segment_text: str,
    candidates: Sequence[MatchCandidate],
    protected: Iterable[str] = (),
) -> list[MatchInterval]:
    """Collect every place a candidate matches in ``segment_text``.

    Matches that begin or end inside a ``protected`` token (a shortcode
    placeholder) are dropped; a match that covers a whole token is kept.
    """
    intervals: list[MatchInterval] = []
    seen: set[tuple[int, int]] = set()
    if not segment_text:
        return intervals
    spans = protected_spans(segment_text, protected)

    def _record(start: int, end: int, cand: MatchCandidate) -> bool:
        if end <= start or _cuts_protected(start, end, spans):
            return False
        if (start, end) not in seen:
            seen.add((start, end))
            intervals.append(MatchInterval(start, end, cand.replacement, cand.priority))
        return True

    for cand in candidates:
        if not cand.search_text:
            continue
        found = False
        for start, end in _exact_spans(segment_text, cand.search_text):
            found = _record(start, end, cand) or found
        if found or cand.pattern is None:
            continue
        for match in cand.pattern.finditer(segment_text):
            _record(match.start(), match.end(), cand)
    return intervals
