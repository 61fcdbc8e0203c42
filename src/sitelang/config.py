from __future__ import annotations

import os
from dataclasses import dataclass


MT_ENGINES = ("deepl", "google")


@dataclass(frozen=True)
class Config:
    pg_dsn: str | None = None

    source_lang: str = "en"
    target_langs: tuple[str, ...] = ("fr", "de")
    default_lang: str | None = None

    mt_primary: str = "deepl"
    translate_batch_size: int = 25

    deepl_api_key: str | None = None
    deepl_api_url: str = "https://api-free.deepl.com/v2"
    deepl_language_cache_seconds: int = 86400

    gcp_project_id: str | None = None
    gcp_location: str = "global"
    gcp_credentials_path: str | None = None

    shortcodes: tuple[str, ...] = ()

    http_user_agent: str = "sitelang/0.1"
    http_timeout: int = 30

    @property
    def selected_lang(self) -> str | None:
        if self.default_lang:
            return self.default_lang
        return self.target_langs[0] if self.target_langs else None


def load_config() -> Config:
    def _load_list(name: str, default: str = "") -> tuple[str, ...]:
        raw = os.getenv(name, default)
        items = []
        for part in raw.split(","):
            part = part.strip()
            if not part:
                continue
            items.append(part)
        return tuple(items)

    def _load_int(name: str, default: int) -> int:
        raw = os.getenv(name)
        if raw is None or not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError as exc:
            raise RuntimeError(f"{name} must be an integer") from exc
        if value <= 0:
            raise RuntimeError(f"{name} must be positive")
        return value

    mt_primary = os.getenv("SITELANG_MT_PRIMARY", "deepl").strip().lower()
    if mt_primary not in MT_ENGINES:
        raise RuntimeError(
            f"SITELANG_MT_PRIMARY must be one of: {', '.join(MT_ENGINES)}"
        )

    target_langs = tuple(
        lang.lower() for lang in _load_list("SITELANG_TARGET_LANGS", "fr,de")
    )

    cfg = Config(
        pg_dsn=os.getenv("DATABASE_URL"),
        source_lang=os.getenv("SITELANG_SOURCE_LANG", "en").lower(),
        target_langs=target_langs,
        default_lang=(os.getenv("SITELANG_DEFAULT_LANG") or "").lower() or None,
        mt_primary=mt_primary,
        translate_batch_size=_load_int("SITELANG_TRANSLATE_BATCH_SIZE", 25),
        deepl_api_key=os.getenv("DEEPL_API_KEY"),
        deepl_api_url=os.getenv("DEEPL_API_URL", "https://api-free.deepl.com/v2").rstrip("/"),
        deepl_language_cache_seconds=_load_int("DEEPL_LANGUAGE_CACHE_SECONDS", 86400),
        gcp_project_id=os.getenv("GCP_PROJECT_ID"),
        gcp_location=os.getenv("GCP_LOCATION", "global"),
        gcp_credentials_path=os.getenv("GCP_CREDENTIALS_PATH")
        or os.getenv("GCP_CREDENTIALS_JSON"),
        shortcodes=_load_list("SITELANG_SHORTCODES"),
        http_user_agent=os.getenv("SITELANG_USER_AGENT", "sitelang/0.1"),
        http_timeout=_load_int("SITELANG_HTTP_TIMEOUT", 30),
    )
    return cfg


def require_dsn(cfg: Config) -> str:
    if not cfg.pg_dsn:
        raise RuntimeError("Missing required env var: DATABASE_URL")
    return cfg.pg_dsn
