"""truthlens.monitor – input classification and safe content fetching."""
from .content_discovery import classify_input, is_direct_image_url
from .image_scanner import SafeImageFetcher, sniff_image_type

__all__ = [
    "SafeImageFetcher",
    "sniff_image_type",
    "classify_input",
    "is_direct_image_url",
]
