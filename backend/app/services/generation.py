# app/services/generation.py
"""
Image generation providers.

A provider turns prompt text into zero or more images. Each output carries either
raw bytes or a remote URL; the lifecycle controller hands either form to the
image host before attaching the resulting records to the prompt.
"""
import base64
from dataclasses import dataclass
from typing import Protocol

import httpx

from app.config import Settings, settings as default_settings
from app.core.errors import UpstreamError


@dataclass(frozen=True)
class GeneratedImage:
    image_bytes: bytes | None = None
    image_url: str | None = None
    mime_type: str = "image/png"


class ImageGenerator(Protocol):
    provider_name: str

    async def generate(self, prompt_text: str, count: int = 1, size: str = "1024x1024") -> list[GeneratedImage]:
        ...


class PlaceholderGenerator:
    """Produces no images: prompts go straight to done once handed over."""
    provider_name = "placeholder"

    async def generate(self, prompt_text: str, count: int = 1, size: str = "1024x1024") -> list[GeneratedImage]:
        return []


class WebhookGenerator:
    """
    Posts {"prompt", "count", "size"} to a webhook and reads back
    {"images": [{"url" | "b64_json", "mime_type"?}, ...]}.
    """
    provider_name = "webhook"

    def __init__(self, url: str | None, token: str | None = None, timeout: float = 60,
                 client: httpx.AsyncClient | None = None):
        self.url = (url or "").strip()
        self.token = (token or "").strip()
        self.timeout = timeout
        self._client = client

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @staticmethod
    def _decode_base64(data: str) -> bytes:
        cleaned = data.strip()
        if cleaned.startswith("data:") and "," in cleaned:
            cleaned = cleaned.split(",", 1)[1]
        return base64.b64decode(cleaned)

    async def generate(self, prompt_text: str, count: int = 1, size: str = "1024x1024") -> list[GeneratedImage]:
        if not self.url:
            raise UpstreamError("Image generation webhook is not configured")

        payload = {"prompt": prompt_text, "count": count, "size": size}
        try:
            if self._client is not None:
                resp = await self._client.post(self.url, headers=self._headers(), json=payload)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    resp = await client.post(self.url, headers=self._headers(), json=payload)
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamError("Image generation failed",
                                context={"status": exc.response.status_code, "body": exc.response.text[:240]})
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamError("Image generation failed", context={"error": repr(exc)})

        images = []
        for item in body.get("images") or []:
            url = (item.get("url") or "").strip() or None
            b64 = (item.get("b64_json") or "").strip() or None
            if not url and not b64:
                raise UpstreamError("Image generation returned an empty image", context={"item": item})
            images.append(GeneratedImage(
                image_bytes=self._decode_base64(b64) if b64 else None,
                image_url=url,
                mime_type=item.get("mime_type") or "image/png",
            ))
        return images


def build_generator(settings: Settings | None = None) -> ImageGenerator:
    """Pick the provider named by IMAGE_PROVIDER (unknown names fall back to placeholder)."""
    settings = settings or default_settings
    provider = settings.image_provider.strip().lower()
    if provider == "webhook":
        return WebhookGenerator(
            url=settings.image_webhook_url,
            token=settings.image_webhook_token,
            timeout=settings.image_webhook_timeout,
        )
    return PlaceholderGenerator()
