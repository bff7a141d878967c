# app/services/image_host.py
"""
External image host client (Cloudinary upload API over HTTP).

Only two calls are used:
  POST {base}/{cloud}/image/upload   -> secure_url + public_id
  POST {base}/{cloud}/image/destroy  -> result "ok" | "not found"
Requests are signed: sha1 of the sorted "k=v&..." parameters followed by the API secret.
"""
import hashlib
import time
from dataclasses import dataclass
from typing import Protocol

import httpx

from app.config import Settings, settings as default_settings
from app.core.errors import UpstreamError


@dataclass(frozen=True)
class UploadResult:
    url: str
    storage_id: str


class ImageHost(Protocol):
    async def upload(self, data: bytes | str, folder: str | None = None,
                     filename: str = "upload") -> UploadResult:
        """Store bytes (or a remote URL) and return the durable URL + deletable id."""
        ...

    async def delete(self, storage_id: str) -> None:
        ...

    async def aclose(self) -> None:
        ...


def sign_params(params: dict, api_secret: str) -> str:
    """Cloudinary request signature for the given (unsigned) parameters."""
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params) if params[k] not in (None, ""))
    return hashlib.sha1((to_sign + api_secret).encode("utf-8")).hexdigest()


class CloudinaryImageHost:
    def __init__(
        self,
        cloud_name: str | None,
        api_key: str | None,
        api_secret: str | None,
        api_base: str = "https://api.cloudinary.com/v1_1",
        default_folder: str = "ai-prompts",
        timeout: float = 60,
        client: httpx.AsyncClient | None = None,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.api_base = api_base.rstrip("/")
        self.default_folder = default_folder
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "CloudinaryImageHost":
        settings = settings or default_settings
        return cls(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            api_base=settings.cloudinary_api_base,
            default_folder=settings.cloudinary_upload_folder,
            timeout=settings.cloudinary_timeout,
        )

    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _endpoint(self, action: str) -> str:
        return f"{self.api_base}/{self.cloud_name}/image/{action}"

    def _signed(self, params: dict) -> dict:
        if not self.is_configured():
            raise UpstreamError("Image host is not configured",
                                context={"missing": "CLOUDINARY_CLOUD_NAME/API_KEY/API_SECRET"})
        params = {**params, "timestamp": int(time.time())}
        return {**params, "api_key": self.api_key, "signature": sign_params(params, self.api_secret)}

    async def upload(self, data: bytes | str, folder: str | None = None,
                     filename: str = "upload") -> UploadResult:
        """
        Upload image bytes, or let the host fetch a remote URL / data URI when data is a str.

        Raises:
            UpstreamError: host not configured, transport failure or non-2xx response
        """
        form = self._signed({"folder": folder or self.default_folder})
        try:
            if isinstance(data, str):
                resp = await self._client.post(self._endpoint("upload"), data={**form, "file": data})
            else:
                files = {"file": (filename, data, "application/octet-stream")}
                resp = await self._client.post(self._endpoint("upload"), data=form, files=files)
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamError("Image upload failed",
                                context={"status": exc.response.status_code, "body": exc.response.text[:240]})
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamError("Image upload failed", context={"error": repr(exc)})

        url = body.get("secure_url") or body.get("url")
        storage_id = body.get("public_id")
        if not url or not storage_id:
            raise UpstreamError("Image upload failed", context={"body": body})
        return UploadResult(url=url, storage_id=storage_id)

    async def delete(self, storage_id: str) -> None:
        """
        Remove an image from the host. "not found" counts as success.

        Raises:
            UpstreamError: host not configured, transport failure or unexpected result
        """
        form = self._signed({"public_id": storage_id})
        try:
            resp = await self._client.post(self._endpoint("destroy"), data=form)
            resp.raise_for_status()
            result = resp.json().get("result")
        except httpx.HTTPStatusError as exc:
            raise UpstreamError("Image deletion failed",
                                context={"status": exc.response.status_code, "storage_id": storage_id})
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamError("Image deletion failed", context={"error": repr(exc), "storage_id": storage_id})
        if result not in ("ok", "not found"):
            raise UpstreamError("Image deletion failed", context={"result": result, "storage_id": storage_id})

    async def aclose(self) -> None:
        await self._client.aclose()
