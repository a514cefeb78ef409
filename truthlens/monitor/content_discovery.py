"""
truthlens.monitor.content_discovery – decide how submitted content is analysed.

classify_input inspects what the user pasted and picks the analysis path:
a direct image link is fetched and sent to the multimodal model, any other
http(s) URL gets the URL-audit prompt, and everything else is plain text.
"""
from __future__ import annotations

from typing import Literal
from urllib.parse import urlparse

InputKind = Literal["IMAGE", "URL", "TEXT"]

# Known image file extensions
_IMAGE_EXTENSIONS = {
    ".jpg", ".jpeg", ".png", ".gif", ".webp",
    ".bmp", ".tiff", ".tif",
}


def _extension(path: str) -> str:
    last = path.rsplit("/", 1)[-1]
    if "." not in last:
        return ""
    return "." + last.rsplit(".", 1)[-1]


def classify_input(value: str) -> InputKind:
    """
    Classify user input into an analysis category.

    Returns:
        "IMAGE" | "URL" | "TEXT"
    """
    candidate = value.strip()
    if not candidate or any(ch.isspace() for ch in candidate):
        return "TEXT"

    parsed = urlparse(candidate.lower())
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        return "TEXT"

    if _extension(parsed.path) in _IMAGE_EXTENSIONS:
        return "IMAGE"
    return "URL"


def is_direct_image_url(url: str) -> bool:
    """Return True if the URL almost certainly points to a raw image file."""
    return classify_input(url) == "IMAGE"
