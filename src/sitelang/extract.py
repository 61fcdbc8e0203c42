from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Protocol

import psycopg
import requests

from .config import Config
from .db import insert_fragment
from .shortcodes import DirectiveGrammar, grammar_for, is_directives_only
from .text import normalize_fragment
from .tokenizer import SegmentKind, split_html


log = logging.getLogger("sitelang.extract")


@dataclass(frozen=True)
class ContentItem:
    title: str
    body: str
    type: str = "page"


@dataclass
class NavItem:
    label: str
    object_id: int | None = None
    children: list["NavItem"] = field(default_factory=list)


class ContentSource(Protocol):
    def published_items(self) -> Iterable[ContentItem]:
        ...

    def navigation(self) -> Iterable[NavItem]:
        ...

    def resolve_title(self, object_id: int) -> str | None:
        ...

    def product_urls(self) -> Iterable[str]:
        ...


@dataclass
class ExtractStats:
    sources: int = 0
    found: int = 0
    inserted: int = 0
    fetch_errors: int = 0


def _nav_from_json(data: dict[str, Any]) -> NavItem:
    return NavItem(
        label=str(data.get("label") or ""),
        object_id=data.get("object_id"),
        children=[_nav_from_json(child) for child in data.get("children") or []],
    )


class JsonContentSource:
    """Content source backed by a JSON export of the site.

    Expected keys: ``items`` (title, body, type), ``navigation`` (label,
    object_id, children) and ``products`` (URLs rendered over HTTP).
    """

    def __init__(self, path: str | Path):
        raw = Path(path).read_text(encoding="utf-8")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise RuntimeError(f"content export {path} is not valid JSON") from exc
        if not isinstance(data, dict):
            raise RuntimeError(f"content export {path} must be a JSON object")
        self._items = [
            ContentItem(
                title=str(item.get("title") or ""),
                body=str(item.get("body") or ""),
                type=str(item.get("type") or "page"),
            )
            for item in data.get("items") or []
        ]
        self._navigation = [_nav_from_json(entry) for entry in data.get("navigation") or []]
        self._titles = {
            int(item["id"]): str(item.get("title") or "")
            for item in data.get("items") or []
            if item.get("id") is not None
        }
        self._products = [str(url) for url in data.get("products") or []]

    def published_items(self) -> list[ContentItem]:
        return list(self._items)

    def navigation(self) -> list[NavItem]:
        return list(self._navigation)

    def resolve_title(self, object_id: int) -> str | None:
        return self._titles.get(int(object_id))

    def product_urls(self) -> list[str]:
        return list(self._products)


def collect_nav_labels(
    items: Iterable[NavItem], resolve_title: Callable[[int], str | None]
) -> list[str]:
    labels: list[str] = []
    for item in items:
        label = item.label.strip()
        if not label and item.object_id is not None:
            label = (resolve_title(item.object_id) or "").strip()
        if label:
            labels.append(label)
        labels.extend(collect_nav_labels(item.children, resolve_title))
    return labels


def fetch_html(
    session: requests.Session, url: str, timeout: int = 30, user_agent: str = "sitelang/0.1"
) -> str | None:
    try:
        resp = session.get(url, headers={"User-Agent": user_agent}, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        log.warning("fetch failed for %s: %s", url, exc)
        return None
    return resp.text


def _is_translatable(text: str) -> bool:
    return any(ch.isalpha() for ch in text)


def fragments_from_html(html: str, grammar: DirectiveGrammar | None = None) -> list[str]:
    out: list[str] = []
    seen: set[str] = set()
    for seg in split_html(html or ""):
        if seg.kind is not SegmentKind.TEXT or not seg.eligible:
            continue
        text = normalize_fragment(seg.text)
        if not text or text in seen:
            continue
        if not _is_translatable(text) or is_directives_only(text, grammar):
            continue
        seen.add(text)
        out.append(text)
    return out


def extract_site(
    cfg: Config,
    conn: psycopg.Connection,
    source: ContentSource,
    session: requests.Session | None = None,
    grammar: DirectiveGrammar | None = None,
) -> ExtractStats:
    """Walk every content source and store fragments not seen before."""
    if grammar is None:
        grammar = grammar_for(cfg.shortcodes)
    stats = ExtractStats()
    texts: list[str] = []

    for item in source.published_items():
        stats.sources += 1
        texts.extend(fragments_from_html(item.title, grammar))
        texts.extend(fragments_from_html(item.body, grammar))

    nav_labels = collect_nav_labels(source.navigation(), source.resolve_title)
    stats.sources += len(nav_labels)
    for label in nav_labels:
        texts.extend(fragments_from_html(label, grammar))

    urls = list(source.product_urls())
    if urls:
        session = session or requests.Session()
    for url in urls:
        stats.sources += 1
        html = fetch_html(session, url, cfg.http_timeout, cfg.http_user_agent)
        if html is None:
            stats.fetch_errors += 1
            continue
        texts.extend(fragments_from_html(html, grammar))

    seen: set[str] = set()
    for text in texts:
        if text in seen:
            continue
        seen.add(text)
        stats.found += 1
        if insert_fragment(conn, text, cfg.source_lang) is not None:
            stats.inserted += 1
    log.info(
        "extract: sources=%s found=%s inserted=%s fetch_errors=%s",
        stats.sources,
        stats.found,
        stats.inserted,
        stats.fetch_errors,
    )
    return stats
