from __future__ import annotations

import logging
from dataclasses import dataclass

import psycopg
import requests

from .config import Config
from .db import Fragment, fetch_untranslated, upsert_translation
from .engines.base import TranslationEngine
from .engines.deepl import DeepLTranslator
from .engines.google_v3 import GoogleTranslateV3
from .shortcodes import DirectiveGrammar, grammar_for, is_directives_only, missing_directives


log = logging.getLogger("sitelang.translate")


@dataclass
class BatchStats:
    considered: int = 0
    stored: int = 0
    rejected: int = 0
    skipped: int = 0
    failed: int = 0


def build_engine(cfg: Config, session: requests.Session | None = None) -> TranslationEngine:
    if cfg.mt_primary == "google":
        return GoogleTranslateV3(
            project_id=cfg.gcp_project_id,
            location=cfg.gcp_location,
            credentials_path=cfg.gcp_credentials_path,
        )
    return DeepLTranslator(
        api_key=cfg.deepl_api_key,
        session=session or requests.Session(),
        api_url=cfg.deepl_api_url,
        user_agent=cfg.http_user_agent,
        timeout=cfg.http_timeout,
        cache_seconds=cfg.deepl_language_cache_seconds,
    )


def _chunks(items: list[Fragment], size: int) -> list[list[Fragment]]:
    return [items[i : i + size] for i in range(0, len(items), size)]


def translate_missing(
    cfg: Config,
    conn: psycopg.Connection,
    engine: TranslationEngine,
    lang: str,
    limit: int | None = None,
    dry_run: bool = False,
    grammar: DirectiveGrammar | None = None,
) -> BatchStats:
    """Machine-translate every fragment that has no translation for ``lang``."""
    if grammar is None:
        grammar = grammar_for(cfg.shortcodes)
    stats = BatchStats()
    pending = []
    for fragment in fetch_untranslated(conn, lang, limit=limit):
        stats.considered += 1
        if is_directives_only(fragment.original_text, grammar):
            stats.skipped += 1
            continue
        pending.append(fragment)

    if dry_run:
        log.info("dry-run: %s fragments would be translated to %s", len(pending), lang)
        stats.skipped += len(pending)
        return stats

    for batch in _chunks(pending, max(1, cfg.translate_batch_size)):
        texts = [fragment.original_text for fragment in batch]
        try:
            results = engine.translate(texts, cfg.source_lang, lang)
        except Exception as exc:
            log.warning("translation batch failed (%s fragments): %s", len(batch), exc)
            stats.failed += len(batch)
            continue
        for fragment, result in zip(batch, results):
            text = (result.text or "").strip()
            if not text or text == fragment.original_text:
                stats.skipped += 1
                continue
            missing = missing_directives(fragment.original_text, text, grammar)
            if missing:
                log.warning(
                    "reject translation of fragment %s: missing shortcodes %s",
                    fragment.id,
                    ", ".join(sorted(missing)),
                )
                stats.rejected += 1
                continue
            upsert_translation(conn, fragment.id, lang, text, result.engine)
            stats.stored += 1
    log.info(
        "translated lang=%s considered=%s stored=%s rejected=%s failed=%s",
        lang,
        stats.considered,
        stats.stored,
        stats.rejected,
        stats.failed,
    )
    return stats


def set_manual_translation(
    conn: psycopg.Connection, fragment_id: int, lang: str, text: str
) -> None:
    text = (text or "").strip()
    if not text:
        raise ValueError("translation text must not be empty")
    upsert_translation(conn, fragment_id, lang, text, "manual")
    log.info("stored manual translation for fragment %s lang=%s", fragment_id, lang)
