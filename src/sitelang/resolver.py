from __future__ import annotations

from bisect import bisect_right
from typing import Sequence

from .matcher import MatchInterval


def select_intervals(intervals: Sequence[MatchInterval]) -> list[MatchInterval]:
    """Pick the non-overlapping subset covering the most characters.

    Weighted interval scheduling. On equal coverage the subset with fewer
    intervals wins; on equal count the scan order (end, start, priority)
    decides.
    """
    if not intervals:
        return []
    ordered = sorted(intervals, key=lambda iv: (iv.end, iv.start, iv.priority))
    ends = [iv.end for iv in ordered]
    n = len(ordered)

    # best[i] = (weight, count) over the first i intervals
    best: list[tuple[int, int]] = [(0, 0)] * (n + 1)
    take = [False] * (n + 1)
    prev = [0] * (n + 1)
    for i in range(1, n + 1):
        iv = ordered[i - 1]
        p = bisect_right(ends, iv.start, 0, i - 1)
        prev[i] = p
        inc_weight = best[p][0] + iv.weight
        inc_count = best[p][1] + 1
        exc_weight, exc_count = best[i - 1]
        if inc_weight > exc_weight or (inc_weight == exc_weight and inc_count <= exc_count):
            best[i] = (inc_weight, inc_count)
            take[i] = True
        else:
            best[i] = best[i - 1]

    selected: list[MatchInterval] = []
    i = n
    while i > 0:
        if take[i]:
            selected.append(ordered[i - 1])
            i = prev[i]
        else:
            i -= 1
    selected.sort(key=lambda iv: iv.start)
    return selected


def apply_intervals(segment_text: str, intervals: Sequence[MatchInterval]) -> str:
    selected = select_intervals(intervals)
    if not selected:
        return segment_text
    out = []
    last = 0
    for iv in selected:
        out.append(segment_text[last : iv.start])
        out.append(iv.replacement)
        last = iv.end
    out.append(segment_text[last:])
    return "".join(out)
