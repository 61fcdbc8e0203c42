from __future__ import annotations

import re
from typing import Iterable, Sequence

from .matcher import MatchCandidate
from .text import (
    ELLIPSIS,
    normalize_for_prefix,
    raw_ellipsis_tail,
    split_outer_whitespace,
    split_trailing_ellipsis,
)


MIN_EXCERPT_RATIO = 0.6
FULL_MATCH_RATIO = 0.98
TARGET_RATIO_FLOOR = 0.35
TARGET_RATIO_CEIL = 0.97
BOUNDARY_MIN_FRACTION = 0.65
BOUNDARY_MAX_OVERSHOOT = 1.35
WORD_CUT_MIN_FRACTION = 0.6

SENTENCE_END_RE = re.compile(
    r"(?:[.!?…]+[\"'”’»)\]]*(?=\s|$)|[。！？]+[」』”’）】]*)"
)
SENTENCE_TAIL_RE = re.compile(r"(?:[.!?…]+[\"'”’»)\]]*|[。！？]+[」』”’）】]*)$")
WHITESPACE_RE = re.compile(r"\s")
DANGLING_PUNCT = " ,;:-–—"


def _sentence_cut(text: str, target: int) -> int | None:
    boundaries = [m.end() for m in SENTENCE_END_RE.finditer(text)]
    before = [b for b in boundaries if target * BOUNDARY_MIN_FRACTION <= b <= target]
    if before:
        return max(before)
    after = [b for b in boundaries if target < b <= target * BOUNDARY_MAX_OVERSHOOT]
    if after:
        return min(after)
    return None


def _word_cut(text: str, target: int) -> int:
    spaces = [m.start() for m in WHITESPACE_RE.finditer(text, 0, target + 1)]
    if spaces and spaces[-1] >= target * WORD_CUT_MIN_FRACTION:
        return spaces[-1]
    return target


def _avoid_protected(text: str, cut: int, protected: Iterable[str]) -> int:
    for token in protected:
        if not token:
            continue
        start = text.find(token)
        while start != -1:
            end = start + len(token)
            if start < cut < end:
                return start if start > 0 else end
            start = text.find(token, end)
    return cut


def ends_with_sentence(text: str) -> bool:
    return bool(SENTENCE_TAIL_RE.search(text.rstrip()))


def truncate_translation(text: str, ratio: float, protected: Iterable[str] = ()) -> str:
    """Cut a translation to roughly ``ratio`` of its length.

    Prefers a sentence boundary near the target, then a word boundary, then a
    raw character cut. Placeholder tokens in ``protected`` are never split.
    """
    length = len(text)
    if not length:
        return text
    target_ratio = min(max(ratio, TARGET_RATIO_FLOOR), TARGET_RATIO_CEIL)
    target = max(1, int(round(length * target_ratio)))
    if target >= length:
        return text

    cut = _sentence_cut(text, target)
    if cut is None:
        cut = _word_cut(text, target)
    cut = _avoid_protected(text, cut, protected)
    return text[:cut].rstrip().rstrip(DANGLING_PUNCT)


def _best_candidate(
    norm: str, had_ellipsis: bool, candidates: Sequence[MatchCandidate]
) -> tuple[MatchCandidate, float] | None:
    best: tuple[MatchCandidate, float] | None = None
    best_key: tuple[float, int] | None = None
    for cand in candidates:
        full = cand.normalized_search
        if not full or len(norm) > len(full) or not full.startswith(norm):
            continue
        ratio = len(norm) / len(full)
        if ratio < MIN_EXCERPT_RATIO and not had_ellipsis:
            continue
        key = (ratio, len(full))
        if best_key is None or key > best_key:
            best = (cand, ratio)
            best_key = key
    return best


def _keep_placeholders(excerpt: str, translation: str, required: Sequence[str]) -> str:
    # excerpt is a prefix of translation, which holds every required token.
    end = len(excerpt)
    for token in required:
        if token not in excerpt:
            end = max(end, translation.find(token) + len(token))
    if end == len(excerpt):
        return excerpt
    return translation[:end].rstrip().rstrip(DANGLING_PUNCT)


def reconstruct_excerpt(
    segment_text: str,
    candidates: Sequence[MatchCandidate],
    protected: Iterable[str] = (),
) -> str | None:
    """Rebuild a translated excerpt for a segment that is a truncated fragment.

    Returns the full replacement text for the segment, or None when no
    candidate has a confident prefix relationship with it. Placeholders shown
    in the segment are kept in the excerpt; if one cannot be kept the segment
    is left alone.
    """
    lead, body, tail = split_outer_whitespace(segment_text)
    if not body:
        return None
    norm, had_ellipsis = normalize_for_prefix(body)
    if not norm:
        return None

    found = _best_candidate(norm, had_ellipsis, candidates)
    if found is None:
        return None
    cand, ratio = found

    translation = cand.replacement.strip()
    if not translation:
        return None
    protected = tuple(protected)
    required = [token for token in protected if token and token in body]
    if any(token not in translation for token in required):
        return None
    if ratio >= FULL_MATCH_RATIO:
        return lead + translation + tail

    excerpt = truncate_translation(translation, ratio, protected)
    excerpt = _keep_placeholders(excerpt, translation, required)
    if not excerpt:
        return None
    shortened = len(excerpt) < len(translation)
    if had_ellipsis or (shortened and not ends_with_sentence(excerpt)):
        if not split_trailing_ellipsis(excerpt)[1]:
            marker = raw_ellipsis_tail(body)
            if "[" in marker:
                # WordPress "[…]" excerpt tail, kept as the site renders it.
                excerpt += marker
            elif not ends_with_sentence(excerpt):
                excerpt += marker or ELLIPSIS
    return lead + excerpt + tail
