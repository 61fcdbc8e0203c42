from __future__ import annotations

import hashlib
import re
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Protocol


# [name attrs], [name /] and [/name]; the name must start with a letter so
# citations like [1] are left alone.
GENERIC_SHORTCODE_RE = re.compile(r"\[/?[A-Za-z][\w-]*(?:\s[^\[\]<>]*)?/?\]")


class DirectiveGrammar(Protocol):
    def pattern(self) -> re.Pattern[str] | None:
        ...


@dataclass(frozen=True)
class RegisteredShortcodes:
    """Grammar for a host that knows its registered shortcode names.

    Enclosing shortcodes (``[name]...[/name]``) are matched as a single token,
    the same way the host expands them.
    """

    names: tuple[str, ...]

    def pattern(self) -> re.Pattern[str] | None:
        names = [n for n in self.names if n]
        if not names:
            return None
        alternation = "|".join(re.escape(n) for n in sorted(names, key=len, reverse=True))
        return re.compile(
            r"\[(?P<name>" + alternation + r")(?![\w-])[^\[\]<>]*?"
            r"(?:/\]|\](?:(?:(?!\[/(?P=name)\]).)*?\[/(?P=name)\])?)",
            re.DOTALL,
        )


@dataclass
class MaskResult:
    text: str
    placeholders: dict[str, str] = field(default_factory=dict)
    reverse: dict[str, str] = field(default_factory=dict)


def directive_pattern(grammar: DirectiveGrammar | None = None) -> re.Pattern[str]:
    if grammar is not None:
        pattern = grammar.pattern()
        if pattern is not None:
            return pattern
    return GENERIC_SHORTCODE_RE


def _unique_prefix(text: str) -> str:
    salt = 0
    while True:
        seed = f"{text}{time.time()}{salt}".encode("utf-8")
        prefix = "__SC" + hashlib.md5(seed).hexdigest()[:10] + "_"
        if prefix not in text:
            return prefix
        salt += 1


def mask(text: str, grammar: DirectiveGrammar | None = None) -> MaskResult:
    pattern = directive_pattern(grammar)
    if not text or not pattern.search(text):
        return MaskResult(text=text)

    prefix = _unique_prefix(text)
    placeholders: dict[str, str] = {}
    reverse: dict[str, str] = {}

    def _sub(match: re.Match) -> str:
        token = match.group(0)
        existing = reverse.get(token)
        if existing is not None:
            return existing
        key = f"{prefix}{len(placeholders)}__"
        placeholders[key] = token
        reverse[token] = key
        return key

    masked = pattern.sub(_sub, text)
    return MaskResult(text=masked, placeholders=placeholders, reverse=reverse)


def unmask(text: str, placeholders: dict[str, str]) -> str:
    if not placeholders:
        return text
    for key, value in placeholders.items():
        text = text.replace(key, value)
    return text


def apply_reverse(text: str, reverse: dict[str, str]) -> str:
    if not reverse or not text:
        return text
    # Enclosing tokens may contain shorter ones.
    for token in sorted(reverse, key=len, reverse=True):
        if token in text:
            text = text.replace(token, reverse[token])
    return text


def directive_tokens(text: str, grammar: DirectiveGrammar | None = None) -> list[str]:
    if not text:
        return []
    return [m.group(0) for m in directive_pattern(grammar).finditer(text)]


def is_directives_only(text: str, grammar: DirectiveGrammar | None = None) -> bool:
    stripped = directive_pattern(grammar).sub("", text or "")
    return not stripped.strip()


def preserves_directives(
    original: str, translated: str, grammar: DirectiveGrammar | None = None
) -> bool:
    required = Counter(directive_tokens(original, grammar))
    if not required:
        return True
    translated = translated or ""
    return all(translated.count(token) >= count for token, count in required.items())


def missing_directives(
    original: str, translated: str, grammar: DirectiveGrammar | None = None
) -> set[str]:
    required = Counter(directive_tokens(original, grammar))
    translated = translated or ""
    return {token for token, count in required.items() if translated.count(token) < count}


def grammar_for(names: Iterable[str]) -> DirectiveGrammar | None:
    names = tuple(n.strip() for n in names if n and n.strip())
    if not names:
        return None
    return RegisteredShortcodes(names)
