"""
truthlens.monitor.image_scanner – safe remote image fetcher.

SafeImageFetcher validates URLs, blocks SSRF targets, enforces a size cap,
checks the content type (or magic bytes when none is sent) and returns the
image bytes together with their MIME type for multimodal analysis.
"""
from __future__ import annotations

import asyncio
import ipaddress
import logging
import socket
from urllib.parse import urlparse

import httpx

from truthlens.errors import ContentFetchError

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 10 * 1024 * 1024  # 10 MB hard cap
REQUEST_TIMEOUT_SECONDS = 6.0
MAX_REDIRECTS = 3

ALLOWED_CONTENT_TYPES = {
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/gif",
    "image/bmp",
    "image/tiff",
}

_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\xFF\xD8\xFF",        "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n",   "image/png"),
    (b"GIF87a",              "image/gif"),
    (b"GIF89a",              "image/gif"),
    (b"RIFF",                "image/webp"),
    (b"BM",                  "image/bmp"),
    (b"II*\x00",             "image/tiff"),
    (b"MM\x00*",             "image/tiff"),
)


def sniff_image_type(blob: bytes) -> str | None:
    """Return the MIME type implied by the leading bytes, if any."""
    for signature, mime_type in _SIGNATURES:
        if blob.startswith(signature):
            return mime_type
    return None


class SafeImageFetcher:
    """
    Fetch a remote image with SSRF protection, size limits, and type validation.

    SSRF mitigations:
    - Only http/https URLs are accepted.
    - Private IP literals in the URL are rejected directly.
    - Hostnames are resolved and every resolved IP is checked before the
      request is issued.
    - Redirects are followed by hand, at most MAX_REDIRECTS hops, and every
      hop goes through the same checks.
    """

    def __init__(
        self,
        timeout_seconds: float = REQUEST_TIMEOUT_SECONDS,
        max_bytes: int = MAX_IMAGE_BYTES,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = httpx.Timeout(
            timeout_seconds, connect=timeout_seconds, read=timeout_seconds
        )
        self.max_bytes = max_bytes
        self._transport = transport

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    async def fetch(self, image_url: str) -> tuple[bytes, str]:
        """
        Fetch *image_url* and return ``(image_bytes, mime_type)``.

        Raises:
            ContentFetchError(400)  Invalid URL or private/reserved host.
            ContentFetchError(413)  Image exceeds size cap.
            ContentFetchError(415)  Unsupported content type.
            ContentFetchError(422)  Fetch failed, empty payload or too many redirects.
        """
        url = image_url
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=False,
                transport=self._transport,
            ) as client:
                for _ in range(MAX_REDIRECTS + 1):
                    self._validate_url_format(url)
                    await self._ensure_public_host(url)
                    async with client.stream(
                        "GET", url, headers={"User-Agent": "TruthLens/1.0"}
                    ) as response:
                        if not response.is_redirect:
                            return await self._read_image(response)
                        url = str(response.url.join(response.headers["location"]))
        except httpx.HTTPError as exc:
            logger.warning("Image fetch failed for %s: %s", image_url, exc)
            raise ContentFetchError(
                "Unable to fetch image from the provided URL", 422
            ) from exc

        raise ContentFetchError("Too many redirects", 422)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _read_image(self, response: httpx.Response) -> tuple[bytes, str]:
        if response.status_code != 200:
            raise ContentFetchError("Unable to fetch image from the provided URL", 422)

        content_type = (
            (response.headers.get("content-type") or "")
            .split(";")[0]
            .strip()
            .lower()
        )
        if content_type and content_type not in ALLOWED_CONTENT_TYPES:
            raise ContentFetchError("Content type is not a supported image format", 415)

        advertised_size = response.headers.get("content-length")
        if (
            advertised_size
            and advertised_size.isdigit()
            and int(advertised_size) > self.max_bytes
        ):
            raise ContentFetchError("Image exceeds maximum allowed size", 413)

        collected = bytearray()
        async for chunk in response.aiter_bytes(64 * 1024):
            if not chunk:
                continue
            collected.extend(chunk)
            if len(collected) > self.max_bytes:
                raise ContentFetchError("Image exceeds maximum allowed size", 413)

        if not collected:
            raise ContentFetchError("Fetched payload is empty", 422)

        if not content_type:
            content_type = sniff_image_type(bytes(collected)) or ""
            if not content_type:
                raise ContentFetchError(
                    "Fetched payload does not appear to be an image", 415
                )

        return bytes(collected), content_type

    @staticmethod
    def _validate_url_format(image_url: str) -> None:
        parsed = urlparse(image_url)
        if parsed.scheme not in {"http", "https"}:
            raise ContentFetchError("image_url must use http or https", 400)
        if not parsed.netloc:
            raise ContentFetchError("image_url host is missing", 400)

    async def _ensure_public_host(self, image_url: str) -> None:
        hostname = urlparse(image_url).hostname
        if not hostname:
            raise ContentFetchError("image_url host is invalid", 400)

        try:
            ip_literal = ipaddress.ip_address(hostname)
        except ValueError:
            ip_literal = None

        if ip_literal is not None:
            if self._is_private_or_reserved(ip_literal):
                raise ContentFetchError("Private or reserved hosts are not allowed", 400)
            return

        try:
            addr_info = await self._resolve_hostname(hostname)
        except socket.gaierror as exc:
            raise ContentFetchError("Could not resolve image host", 422) from exc

        for entry in addr_info:
            ip_obj = ipaddress.ip_address(entry[4][0])
            if self._is_private_or_reserved(ip_obj):
                raise ContentFetchError("Private or reserved hosts are not allowed", 400)

    @staticmethod
    async def _resolve_hostname(hostname: str):
        return await asyncio.to_thread(socket.getaddrinfo, hostname, None)

    @staticmethod
    def _is_private_or_reserved(
        ip_obj: ipaddress.IPv4Address | ipaddress.IPv6Address,
    ) -> bool:
        return any(
            [
                ip_obj.is_private,
                ip_obj.is_loopback,
                ip_obj.is_link_local,
                ip_obj.is_multicast,
                ip_obj.is_unspecified,
                ip_obj.is_reserved,
            ]
        )
