"""Media listing and content-type classification."""
from .registry import MediaEntry, MediaRegistry, build_registry
from .sniffer import category_for_mime, classify, sniff_mime

__all__ = [
    "MediaEntry",
    "MediaRegistry",
    "build_registry",
    "category_for_mime",
    "classify",
    "sniff_mime",
]
