from __future__ import annotations

import logging

import psycopg

from .db import fetch_translation_pairs
from .shortcodes import DirectiveGrammar
from .substitute import substitute


log = logging.getLogger("sitelang.render")


def localize_html(
    conn: psycopg.Connection,
    html: str,
    lang: str,
    grammar: DirectiveGrammar | None = None,
) -> str:
    pairs = fetch_translation_pairs(conn, lang)
    log.info("localizing document (%s chars) to %s with %s translations", len(html), lang, len(pairs))
    return substitute(html, lang, pairs, grammar=grammar)
