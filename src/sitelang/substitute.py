from __future__ import annotations

import logging
from typing import Iterable, Sequence

from .excerpt import reconstruct_excerpt
from .matcher import MatchCandidate, find_intervals, make_candidate
from .resolver import apply_intervals
from .shortcodes import (
    DirectiveGrammar,
    apply_reverse,
    is_directives_only,
    mask,
    preserves_directives,
    unmask,
)
from .tokenizer import Segment, SegmentKind, Splitter, join_segments, split_html


log = logging.getLogger("sitelang.substitute")


def build_candidates(
    pairs: Iterable[tuple[str, str]],
    reverse: dict[str, str] | None = None,
    grammar: DirectiveGrammar | None = None,
) -> list[MatchCandidate]:
    """Turn (original, translation) pairs into match candidates.

    Candidates are expressed in masked form using ``reverse`` so they line up
    with a masked document. Longer search texts get a lower (stronger)
    priority number; input order breaks ties.
    """
    accepted: list[tuple[str, str]] = []
    seen: set[str] = set()
    for original, translated in pairs:
        original = (original or "").strip()
        translated = (translated or "").strip()
        if not original or not translated or original == translated:
            continue
        if is_directives_only(original, grammar):
            continue
        if not preserves_directives(original, translated, grammar):
            log.debug("translation drops shortcodes, not applied: %r", original[:80])
            continue
        search = apply_reverse(original, reverse or {})
        replacement = apply_reverse(translated, reverse or {})
        if search in seen:
            continue
        seen.add(search)
        accepted.append((search, replacement))

    ranked = sorted(
        enumerate(accepted),
        key=lambda item: (-len(item[1][0].encode("utf-8")), item[0]),
    )
    return [
        make_candidate(search, replacement, priority)
        for priority, (_, (search, replacement)) in enumerate(ranked)
    ]


def substitute_segment(
    text: str, candidates: Sequence[MatchCandidate], protected: Iterable[str] = ()
) -> str:
    protected = tuple(protected)
    intervals = find_intervals(text, candidates, protected)
    if intervals:
        return apply_intervals(text, intervals)
    excerpt = reconstruct_excerpt(text, candidates, protected)
    if excerpt:
        return excerpt
    return text


def substitute_segments(
    segments: Sequence[Segment],
    candidates: Sequence[MatchCandidate],
    protected: Iterable[str] = (),
) -> list[Segment]:
    protected = tuple(protected)
    out: list[Segment] = []
    changed = 0
    for seg in segments:
        if seg.kind is not SegmentKind.TEXT or not seg.eligible or not seg.text.strip():
            out.append(seg)
            continue
        new_text = substitute_segment(seg.text, candidates, protected)
        if new_text != seg.text:
            changed += 1
            seg = Segment(new_text, seg.kind, seg.eligible)
        out.append(seg)
    log.debug("substituted %s of %s segments", changed, len(segments))
    return out


def substitute(
    document: str,
    target_lang: str,
    fragments: Iterable[tuple[str, str]],
    grammar: DirectiveGrammar | None = None,
    splitter: Splitter | None = None,
) -> str:
    """Rewrite ``document`` replacing original fragments with translations.

    Markup, <script> and <style> content and shortcodes are never altered.
    The worst outcome is the unchanged document.
    """
    if not document:
        return document
    masked = mask(document, grammar)
    candidates = build_candidates(fragments, masked.reverse, grammar)
    if not candidates:
        log.debug("no usable translations for lang=%s", target_lang)
        return document

    segments = split_html(masked.text, splitter)
    segments = substitute_segments(segments, candidates, masked.placeholders.keys())
    result = unmask(join_segments(segments), masked.placeholders)
    log.debug(
        "lang=%s candidates=%s segments=%s", target_lang, len(candidates), len(segments)
    )
    return result
