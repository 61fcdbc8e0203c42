from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from .config import load_config, require_dsn
from .db import clear_all, ensure_schema, get_conn
from .extract import JsonContentSource, extract_site
from .logging import attach_file_logging, configure_logging
from .render import localize_html
from .shortcodes import grammar_for
from .translate_batch import build_engine, translate_missing


log = logging.getLogger("sitelang")


def main() -> None:
    parser = argparse.ArgumentParser(prog="sitelang")
    parser.add_argument("--init-db", action="store_true", help="create tables and indexes")
    parser.add_argument("--extract", metavar="EXPORT", help="crawl a JSON content export for fragments")
    parser.add_argument("--translate", action="store_true", help="machine-translate missing fragments")
    parser.add_argument("--lang", action="append", default=None, help="target language (repeatable)")
    parser.add_argument("--limit", type=int, default=None, help="max fragments per language")
    parser.add_argument("--render", metavar="FILE", help="localize a rendered HTML file")
    parser.add_argument("--out", metavar="FILE", help="write --render output here instead of stdout")
    parser.add_argument("--languages", action="store_true", help="print the engine's target languages as JSON")
    parser.add_argument("--clear", action="store_true", help="delete all fragments and translations")
    parser.add_argument("--dry-run", action="store_true")
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--verbose", action="store_true", help="log substitution details")
    args = parser.parse_args()

    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    if args.log_file:
        attach_file_logging(args.log_file)
    cfg = load_config()
    grammar = grammar_for(cfg.shortcodes)
    langs = tuple(lang.lower() for lang in args.lang) if args.lang else cfg.target_langs

    if args.languages:
        engine = build_engine(cfg)
        print(json.dumps(engine.language_codes(), ensure_ascii=False, indent=2))
        return

    dsn = require_dsn(cfg)

    if args.clear:
        if args.dry_run:
            log.info("dry-run: skip clear")
        else:
            with get_conn(dsn) as conn:
                removed = clear_all(conn)
            log.info("cleared %s fragments", removed)

    if args.init_db:
        with get_conn(dsn) as conn:
            ensure_schema(conn)

    if args.extract:
        source = JsonContentSource(args.extract)
        with get_conn(dsn) as conn:
            extract_site(cfg, conn, source, grammar=grammar)

    if args.translate:
        engine = build_engine(cfg)
        for lang in langs:
            with get_conn(dsn) as conn:
                translate_missing(
                    cfg, conn, engine, lang, limit=args.limit, dry_run=args.dry_run, grammar=grammar
                )

    if args.render:
        lang = langs[0] if args.lang else cfg.selected_lang
        if not lang:
            raise SystemExit("--render needs --lang or SITELANG_TARGET_LANGS")
        html = Path(args.render).read_text(encoding="utf-8")
        with get_conn(dsn) as conn:
            output = localize_html(conn, html, lang, grammar=grammar)
        if args.out:
            Path(args.out).write_text(output, encoding="utf-8")
            log.info("wrote %s", args.out)
        else:
            print(output)


if __name__ == "__main__":
    main()
