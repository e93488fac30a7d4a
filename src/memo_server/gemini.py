"""Wrapper around the Gemini ``generateContent`` endpoint with memo-specific prompts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

CATEGORY_LABELS = ("Daily", "Work", "Idea", "Learning", "Health", "Finance", "Hobby", "Shopping", "Other")
DEFAULT_CATEGORY = "Other"

TITLE_PROMPT = "Generate one short, clear title for the following text. Return only the title:\n\n{text}"
SUMMARY_PROMPT = "Summarize the following memo in 2-3 lines:\n\n{text}"
CATEGORY_PROMPT = (
    "Analyze the following text and choose the single most fitting category.\n"
    "Options: {labels}\n\n"
    "Reply with the category name only:\n\n{text}"
)


class GeminiError(RuntimeError):
    """Base class for failures talking to the provider."""


class MissingApiKeyError(GeminiError):
    pass


class UpstreamError(GeminiError):
    pass


# -----------------------------
# Types & defaults
# -----------------------------

@dataclass
class GeminiSettings:
    api_key: Optional[str] = None
    api_url: str = "https://generativelanguage.googleapis.com/v1beta"
    model: str = "gemini-pro"
    timeout: float = 30.0

    @property
    def endpoint(self) -> str:
        return f"{self.api_url.rstrip('/')}/models/{self.model}:generateContent"


# -----------------------------
# Client
# -----------------------------

class GeminiClient:
    """Sends one prompt, returns the first candidate's trimmed text."""

    def __init__(self, settings: GeminiSettings, *, transport: Optional[httpx.BaseTransport] = None) -> None:
        self.settings = settings
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.settings.api_key)

    def generate(self, prompt: str) -> str:
        if not self.settings.api_key:
            raise MissingApiKeyError("The Gemini API key is not configured")

        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            with httpx.Client(timeout=self.settings.timeout, transport=self._transport) as client:
                r = client.post(
                    self.settings.endpoint,
                    params={"key": self.settings.api_key},
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Gemini request failed: {e}") from e

        if r.status_code >= 400:
            raise UpstreamError(f"Gemini returned {r.status_code}: {r.text[:300]}")
        try:
            data = r.json()
        except ValueError as e:
            raise UpstreamError("Gemini returned invalid JSON") from e
        return _first_candidate_text(data)

    # -------------------------
    # Memo helpers
    # -------------------------
    def generate_title(self, text: str) -> str:
        return self.generate(TITLE_PROMPT.format(text=text))

    def summarize(self, text: str) -> str:
        return self.generate(SUMMARY_PROMPT.format(text=text))

    def classify_category(self, text: str) -> str:
        labels = ", ".join(CATEGORY_LABELS)
        answer = self.generate(CATEGORY_PROMPT.format(labels=labels, text=text))
        return answer.strip().strip('"').strip() or DEFAULT_CATEGORY


def _first_candidate_text(data: Any) -> str:
    try:
        return str(data["candidates"][0]["content"]["parts"][0]["text"]).strip()
    except (KeyError, IndexError, TypeError) as e:
        raise UpstreamError("Gemini response has no candidates") from e


# -----------------------------
# Convenience factory
# -----------------------------

def create_from_config(cfg: Dict[str, Any]) -> GeminiClient:
    """Create GeminiClient from a config dict (e.g., loaded YAML)."""
    g = (cfg or {}).get("gemini", {}) if isinstance(cfg, dict) else {}
    settings = GeminiSettings(
        api_key=str(g["api_key"]) if g.get("api_key") else None,
        api_url=str(g.get("api_url") or GeminiSettings.api_url),
        model=str(g.get("model") or GeminiSettings.model),
        timeout=float(g.get("timeout") or GeminiSettings.timeout),
    )
    if not settings.api_key:
        logger.warning("No Gemini API key configured; AI endpoints will return 500.")
    return GeminiClient(settings)
