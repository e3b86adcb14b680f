# -----------------------------------------------------------------------------
# This module provides the Google Translate v2 client used by the pipeline:
#   - reads the API key / endpoint / language pair from Settings
#   - issues one GET per line and returns a Result instead of raising
#
# The implementation uses only the Python standard library (`urllib.request`)
# so that it does not introduce additional dependencies. Unit tests are
# expected to *mock* the internal `_get()` method so that no real HTTP calls
# are made during CI.
#
# Response shape
# --------------
#    {"data": {"translations": [{"translatedText": "你覺得緊張嗎？"}]}}
#
# Only `data.translations[0].translatedText` is read. Anything else (missing
# keys, empty list, non-string text) is a per-item failure.
# -----------------------------------------------------------------------------
from __future__ import annotations

import json
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from translines.core.errors import MissingCredentialError, TranslationError
from translines.core.result import Result, err, ok
from translines.core.settings import DEFAULT_TRANSLATE_URL, Settings, load_settings

API_KEY_ENV_VAR = "GOOGLE_API_KEY"


@dataclass(slots=True)
class GoogleTranslator:
    """Thread-safe Google Translate v2 client with a ``Translator`` call signature.

    Parameters
    ----------
    api_key:
        Credential sent as the ``key`` query parameter.
    base_url:
        Endpoint of the v2 API. Overridable for proxies and tests.
    source_language / target_language:
        Language codes; simplified to traditional Chinese by default.
    timeout_seconds:
        Network timeout for each request.
    """

    api_key: str
    base_url: str = DEFAULT_TRANSLATE_URL
    source_language: str = "zh-CN"
    target_language: str = "zh-TW"
    timeout_seconds: float = 30.0

    # --------------------------------------------------------------------- #
    # Constructors
    # --------------------------------------------------------------------- #
    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> GoogleTranslator:
        """Build a client from configuration.

        Raises
        ------
        MissingCredentialError
            If ``GOOGLE_API_KEY`` is unset or blank. This is a startup error,
            not a per-item one.
        """
        s = settings or load_settings()
        if not s.google_api_key:
            raise MissingCredentialError(API_KEY_ENV_VAR)
        return cls(
            api_key=s.google_api_key,
            base_url=s.translate_base_url,
            source_language=s.source_language,
            target_language=s.target_language,
            timeout_seconds=s.request_timeout,
        )

    # --------------------------------------------------------------------- #
    # Public API
    # --------------------------------------------------------------------- #
    def __call__(self, text: str) -> Result[str, str]:
        """Translate one line; never raises for transport or decode failures."""
        try:
            response = self._get(self.build_url(text))
            return ok(self._extract_text(response))
        except TranslationError as exc:
            return err(str(exc))

    def build_url(self, text: str) -> str:
        query = urllib.parse.urlencode(
            {
                "q": text,
                "target": self.target_language,
                "source": self.source_language,
                "key": self.api_key,
            }
        )
        return f"{self.base_url.rstrip('/')}?{query}"

    # --------------------------------------------------------------------- #
    # Internal helpers (test seams)
    # --------------------------------------------------------------------- #
    def _get(self, url: str) -> dict[str, Any]:
        """Perform an HTTP GET and decode the JSON body.

        Raises
        ------
        TranslationError
            On HTTP errors, network errors, or a body that is not a JSON object.
        """
        request = urllib.request.Request(url=url, method="GET")
        try:
            with urllib.request.urlopen(request, timeout=self.timeout_seconds) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore")
            raise TranslationError(
                f"Translate HTTP error {exc.code}: {exc.reason}; body={detail!r}"
            ) from exc
        except (urllib.error.URLError, TimeoutError, OSError) as exc:
            raise TranslationError(f"Translate network error: {exc}") from exc

        try:
            decoded = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise TranslationError("Failed to decode translate response as JSON") from exc

        if not isinstance(decoded, dict):
            raise TranslationError("Translate response is not a JSON object")
        return decoded

    @staticmethod
    def _extract_text(response: Mapping[str, Any]) -> str:
        """Extract ``data.translations[0].translatedText``."""
        data = response.get("data")
        if not isinstance(data, Mapping):
            raise TranslationError("Translate response has no 'data' object")

        translations = data.get("translations")
        if not isinstance(translations, list) or not translations:
            raise TranslationError("Translate response has no translations")

        first = translations[0]
        if not isinstance(first, Mapping):
            raise TranslationError("Translate response translations[0] is invalid")

        text = first.get("translatedText")
        if not isinstance(text, str):
            raise TranslationError("Translate response translations[0].translatedText is missing")
        return text


__all__ = ["GoogleTranslator", "API_KEY_ENV_VAR"]
