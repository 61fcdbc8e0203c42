from __future__ import annotations

from dataclasses import dataclass

from google.cloud import translate

from .base import TranslationResult


# Cloud Translation wants regional variants for a few targets.
TARGET_ALIASES = {"zh": "zh-CN", "pt-br": "pt-BR"}


def google_lang(lang: str) -> str:
    code = lang.strip().replace("_", "-")
    return TARGET_ALIASES.get(code.lower(), code.lower())


@dataclass
class GoogleTranslateV3:
    project_id: str | None
    location: str = "global"
    credentials_path: str | None = None

    name: str = "google_v3"

    def _client(self) -> translate.TranslationServiceClient:
        if self.credentials_path:
            return translate.TranslationServiceClient.from_service_account_file(
                self.credentials_path
            )
        return translate.TranslationServiceClient()

    def translate(
        self,
        texts: list[str],
        source_lang: str,
        target_lang: str,
    ) -> list[TranslationResult]:
        if not texts:
            return []
        if not self.project_id:
            raise RuntimeError("GCP project_id is required for Google Translate v3")

        client = self._client()
        response = client.translate_text(
            request={
                "parent": f"projects/{self.project_id}/locations/{self.location}",
                "contents": list(texts),
                "mime_type": "text/plain",
                "source_language_code": google_lang(source_lang),
                "target_language_code": google_lang(target_lang),
            }
        )
        return [
            TranslationResult(
                text=t.translated_text,
                engine=self.name,
                detected_source_lang=t.detected_language_code or None,
            )
            for t in response.translations
        ]

    def language_codes(self, kind: str = "target") -> dict[str, str]:
        if not self.project_id:
            raise RuntimeError("GCP project_id is required for Google Translate v3")
        response = self._client().get_supported_languages(
            request={
                "parent": f"projects/{self.project_id}/locations/{self.location}",
                "display_language_code": "en",
            }
        )
        flag = "support_source" if kind == "source" else "support_target"
        return {
            lang.language_code: lang.display_name
            for lang in response.languages
            if getattr(lang, flag)
        }
