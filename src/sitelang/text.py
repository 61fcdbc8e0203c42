from __future__ import annotations

import html
import re


ELLIPSIS = "…"

WHITESPACE_RE = re.compile(r"\s+")
# Applied to unescaped text: "...", "…", and the bracketed "[…]" excerpt tail.
ELLIPSIS_TAIL_RE = re.compile(r"\s*(?:\[\s*(?:…|\.{3})\s*\]|…|\.{3,})\s*$")
# Applied to rendered text that may still hold entities.
RAW_ELLIPSIS_TAIL_RE = re.compile(
    r"(?:\s|&nbsp;)*(?:\[\s*(?:…|\.{3}|&hellip;|&#0*8230;|&#[xX]0*2026;)\s*\]"
    r"|…|\.{3,}|&hellip;|&#0*8230;|&#[xX]0*2026;)$"
)


def normalize_text(text: str) -> str:
    if not text:
        return ""
    text = html.unescape(text)
    return WHITESPACE_RE.sub(" ", text).strip()


def split_trailing_ellipsis(text: str) -> tuple[str, bool]:
    match = ELLIPSIS_TAIL_RE.search(text)
    if not match:
        return text, False
    return text[: match.start()].rstrip(), True


def normalize_fragment(text: str) -> str:
    text = normalize_text(text)
    body, had_ellipsis = split_trailing_ellipsis(text)
    if had_ellipsis and body:
        return body + ELLIPSIS
    return text


def normalize_for_prefix(text: str) -> tuple[str, bool]:
    return split_trailing_ellipsis(normalize_text(text))


def raw_ellipsis_tail(raw: str) -> str:
    match = RAW_ELLIPSIS_TAIL_RE.search(raw.rstrip())
    if not match:
        return ""
    return match.group(0)


def split_outer_whitespace(text: str) -> tuple[str, str, str]:
    stripped = text.strip()
    if not stripped:
        return text, "", ""
    lead = text[: len(text) - len(text.lstrip())]
    tail = text[len(text.rstrip()) :]
    return lead, stripped, tail
