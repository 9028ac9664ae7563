from __future__ import annotations

import requests

GEMINI_BASE = "https://generativelanguage.googleapis.com/v1beta"


class GenerationError(Exception):
    """Text generation failed or returned nothing usable."""


class GeminiClient:
    """Minimal Gemini ``generateContent`` client.

    ``generate(prompt)`` returns the model's text, or raises GenerationError.
    """

    def __init__(self, *, api_key: str, model: str = "gemini-2.0-flash", timeout: int = 10):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    def generate(self, prompt: str) -> str:
        if not self.api_key:
            raise GenerationError("GEMINI_API_KEY not set")

        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"responseMimeType": "application/json"},
        }
        try:
            r = requests.post(
                f"{GEMINI_BASE}/models/{self.model}:generateContent",
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise GenerationError(f"gemini_exception:{e}") from e

        if not (200 <= r.status_code < 300):
            raise GenerationError(f"gemini_http_{r.status_code}")

        try:
            data = r.json()
            parts = data["candidates"][0]["content"]["parts"]
            text = "".join(p.get("text", "") for p in parts)
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise GenerationError("gemini_bad_response") from e

        if not text.strip():
            raise GenerationError("gemini_empty_response")
        return text
