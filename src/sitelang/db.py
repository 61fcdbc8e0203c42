from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

import psycopg

log = logging.getLogger("sitelang.db")


SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS fragments (
        id BIGSERIAL PRIMARY KEY,
        original_text TEXT NOT NULL,
        source_locale TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS fragments_original_text_key
    ON fragments (md5(original_text))
    """,
    """
    CREATE TABLE IF NOT EXISTS translations (
        id BIGSERIAL PRIMARY KEY,
        fragment_id BIGINT NOT NULL REFERENCES fragments (id) ON DELETE CASCADE,
        lang TEXT NOT NULL,
        text TEXT NOT NULL,
        engine TEXT,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        UNIQUE (fragment_id, lang)
    )
    """,
)


@dataclass
class Fragment:
    id: int
    original_text: str
    source_locale: str


def connect(dsn: str) -> psycopg.Connection:
    return psycopg.connect(dsn)


@contextmanager
def get_conn(dsn: str) -> Iterator[psycopg.Connection]:
    conn = connect(dsn)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def ensure_schema(conn: psycopg.Connection) -> None:
    with conn.cursor() as cur:
        for statement in SCHEMA_STATEMENTS:
            cur.execute(statement)
    log.info("db schema ready")


def lang_key(lang: str) -> str:
    return (lang or "").strip()[:2].lower()


def insert_fragment(
    conn: psycopg.Connection, original_text: str, source_locale: str
) -> int | None:
    """Store a new fragment; returns None when the exact text already exists."""
    with conn.cursor() as cur:
        cur.execute(
            "SELECT id FROM fragments WHERE original_text = %s LIMIT 1",
            (original_text,),
        )
        if cur.fetchone():
            return None
        cur.execute(
            """
            INSERT INTO fragments (original_text, source_locale)
            VALUES (%s, %s)
            ON CONFLICT DO NOTHING
            RETURNING id
            """,
            (original_text, source_locale),
        )
        row = cur.fetchone()
    if not row:
        return None
    return int(row[0])


def fetch_fragments(conn: psycopg.Connection) -> list[Fragment]:
    with conn.cursor() as cur:
        cur.execute(
            "SELECT id, original_text, source_locale FROM fragments ORDER BY id ASC"
        )
        rows = cur.fetchall()
    return [Fragment(*row) for row in rows]


def update_fragment_text(conn: psycopg.Connection, fragment_id: int, text: str) -> bool:
    with conn.cursor() as cur:
        cur.execute(
            "UPDATE fragments SET original_text = %s WHERE id = %s",
            (text, fragment_id),
        )
        return cur.rowcount > 0


def fetch_translation(
    conn: psycopg.Connection, fragment_id: int, lang: str
) -> str | None:
    with conn.cursor() as cur:
        cur.execute(
            """
            SELECT text
            FROM translations
            WHERE fragment_id = %s AND LOWER(LEFT(lang, 2)) = %s
            ORDER BY updated_at DESC
            LIMIT 1
            """,
            (fragment_id, lang_key(lang)),
        )
        row = cur.fetchone()
    if not row:
        return None
    return row[0]


def upsert_translation(
    conn: psycopg.Connection,
    fragment_id: int,
    lang: str,
    text: str,
    engine: str,
) -> None:
    with conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO translations (fragment_id, lang, text, engine)
            VALUES (%s, %s, %s, %s)
            ON CONFLICT (fragment_id, lang)
            DO UPDATE SET text = EXCLUDED.text, engine = EXCLUDED.engine, updated_at = NOW()
            """,
            (fragment_id, lang.strip().lower(), text, engine),
        )


def fetch_untranslated(
    conn: psycopg.Connection, lang: str, limit: int | None = None
) -> list[Fragment]:
    sql = """
        SELECT f.id, f.original_text, f.source_locale
        FROM fragments f
        WHERE NOT EXISTS (
            SELECT 1 FROM translations t
            WHERE t.fragment_id = f.id AND LOWER(LEFT(t.lang, 2)) = %s
        )
        ORDER BY f.id ASC
    """
    params: tuple = (lang_key(lang),)
    if limit is not None:
        sql += " LIMIT %s"
        params = (lang_key(lang), limit)
    with conn.cursor() as cur:
        cur.execute(sql, params)
        rows = cur.fetchall()
    return [Fragment(*row) for row in rows]


def fetch_translation_pairs(conn: psycopg.Connection, lang: str) -> list[tuple[str, str]]:
    with conn.cursor() as cur:
        cur.execute(
            """
            SELECT DISTINCT ON (f.id) f.original_text, t.text
            FROM fragments f
            JOIN translations t ON t.fragment_id = f.id
            WHERE LOWER(LEFT(t.lang, 2)) = %s
            ORDER BY f.id ASC, t.updated_at DESC
            """,
            (lang_key(lang),),
        )
        rows = cur.fetchall()
    return [(row[0], row[1]) for row in rows]


def clear_all(conn: psycopg.Connection) -> int:
    with conn.cursor() as cur:
        cur.execute("DELETE FROM fragments")
        return int(cur.rowcount)
