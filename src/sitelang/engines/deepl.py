from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any

import requests

from .base import TranslationResult


log = logging.getLogger("sitelang.deepl")

RETRY_STATUS = (429, 503)
PARENTHESES_RE = re.compile(r"\s*\(.*\)")
# DeepL rejects bare regional-ambiguous targets.
TARGET_ALIASES = {"EN": "EN-US", "PT": "PT-PT"}


class DeepLError(RuntimeError):
    pass


def deepl_target_lang(lang: str) -> str:
    code = lang.strip().replace("_", "-").upper()
    return TARGET_ALIASES.get(code, code)


def deepl_source_lang(lang: str) -> str:
    return lang.strip()[:2].upper()


@dataclass
class DeepLTranslator:
    api_key: str | None
    session: requests.Session
    api_url: str = "https://api-free.deepl.com/v2"
    user_agent: str = "sitelang/0.1"
    timeout: int = 30
    cache_seconds: int = 86400

    name: str = "deepl"
    _language_cache: dict[str, tuple[float, list[dict[str, Any]]]] = field(
        default_factory=dict, repr=False
    )

    def _request(self, method: str, path: str, params: Any = None) -> Any:
        if not self.api_key:
            raise DeepLError("DeepL API key is not configured")
        url = f"{self.api_url.rstrip('/')}/{path.lstrip('/')}"
        headers = {
            "Authorization": f"DeepL-Auth-Key {self.api_key}",
            "User-Agent": self.user_agent,
        }
        backoff = 1
        for attempt in range(5):
            if method == "GET":
                resp = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
            else:
                resp = self.session.post(url, data=params, headers=headers, timeout=self.timeout)
            if resp.status_code in RETRY_STATUS and attempt < 4:
                log.warning("deepl busy (%s); backing off %ss", resp.status_code, backoff)
                time.sleep(backoff)
                backoff *= 2
                continue
            try:
                resp.raise_for_status()
            except requests.HTTPError as exc:
                raise DeepLError(f"DeepL API error: {exc}") from exc
            try:
                return resp.json()
            except ValueError as exc:
                raise DeepLError("DeepL API returned invalid JSON") from exc
        raise DeepLError("DeepL API error: exceeded retry attempts")

    def translate(
        self, texts: list[str], source_lang: str, target_lang: str
    ) -> list[TranslationResult]:
        if not texts:
            return []
        params: list[tuple[str, str]] = [("text", text) for text in texts]
        params.append(("target_lang", deepl_target_lang(target_lang)))
        if source_lang:
            params.append(("source_lang", deepl_source_lang(source_lang)))
        data = self._request("POST", "translate", params)
        translations = data.get("translations") if isinstance(data, dict) else None
        if not isinstance(translations, list) or len(translations) != len(texts):
            raise DeepLError("DeepL API returned an unexpected payload")
        results = []
        for item in translations:
            if not isinstance(item, dict) or "text" not in item:
                raise DeepLError("DeepL API returned an unexpected payload")
            results.append(
                TranslationResult(
                    text=str(item["text"]),
                    engine=self.name,
                    detected_source_lang=item.get("detected_source_language"),
                )
            )
        return results

    def languages(self, kind: str = "target") -> list[dict[str, Any]]:
        cached = self._language_cache.get(kind)
        now = time.monotonic()
        if cached and now - cached[0] < self.cache_seconds:
            return cached[1]
        data = self._request("GET", "languages", {"type": kind})
        if not isinstance(data, list) or not data:
            raise DeepLError("DeepL API returned no languages")
        self._language_cache[kind] = (now, data)
        return data

    def language_names(self, strip_parentheses: bool = False, kind: str = "target") -> list[str]:
        names = [str(lang.get("name", "")) for lang in self.languages(kind)]
        if not strip_parentheses:
            return names
        out: list[str] = []
        for name in names:
            name = PARENTHESES_RE.sub("", name)
            if name not in out:
                out.append(name)
        return out

    def language_codes(self, kind: str = "target") -> dict[str, str]:
        return {
            str(lang["language"]): str(lang.get("name", ""))
            for lang in self.languages(kind)
            if "language" in lang
        }
