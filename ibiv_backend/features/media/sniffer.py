"""
Content-type sniffing from leading file bytes.

Classification never looks at the file extension: a `.jpg` holding an MP4
is a video.
"""
from __future__ import annotations

from pathlib import Path
from typing import Callable

from PIL import Image

from ...shared import UNKNOWN_BINARY_MIME, MediaCategory, UnreadableFileError, get_logger

logger = get_logger(__name__)

HEADER_SIZE = 512

# Bytes that never appear in plain text (mimesniff "binary data bytes")
_BINARY_BYTES = frozenset(list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20)))

_IMAGE_FTYP_BRANDS = {
    b"avif": "image/avif",
    b"avis": "image/avif",
    b"heic": "image/heic",
    b"heix": "image/heic",
    b"mif1": "image/heif",
    b"msf1": "image/heif",
}


def _riff(form: bytes) -> Callable[[bytes], bool]:
    return lambda h: h[:4] == b"RIFF" and h[8:12] == form


_SIGNATURES: tuple[tuple[Callable[[bytes], bool], str], ...] = (
    (lambda h: h.startswith(b"\xff\xd8\xff"), "image/jpeg"),
    (lambda h: h.startswith(b"\x89PNG\r\n\x1a\n"), "image/png"),
    (lambda h: h[:6] in (b"GIF87a", b"GIF89a"), "image/gif"),
    (_riff(b"WEBP"), "image/webp"),
    (lambda h: h.startswith(b"BM"), "image/bmp"),
    (lambda h: h[:4] in (b"\x00\x00\x01\x00", b"\x00\x00\x02\x00"), "image/x-icon"),
    (lambda h: h[:4] in (b"II*\x00", b"MM\x00*"), "image/tiff"),
    (_riff(b"AVI "), "video/avi"),
    (_riff(b"WAVE"), "audio/wave"),
    (lambda h: h.startswith(b"OggS\x00"), "application/ogg"),
    (lambda h: h.startswith(b"fLaC"), "audio/flac"),
    (lambda h: h.startswith(b"ID3"), "audio/mpeg"),
    (lambda h: h.startswith(b"%PDF-"), "application/pdf"),
    (lambda h: h.startswith(b"PK\x03\x04"), "application/zip"),
)


def _ftyp_brands(header: bytes) -> list[bytes]:
    """Major and compatible brands of a well-formed leading `ftyp` box."""
    if len(header) < 12 or header[4:8] != b"ftyp":
        return []
    box_size = int.from_bytes(header[0:4], "big")
    if box_size < 12 or box_size % 4 != 0 or box_size > len(header):
        return []
    brands = [header[8:12]]
    brands.extend(header[offset:offset + 4] for offset in range(16, box_size, 4))
    return brands


def _sniff_iso_media(header: bytes) -> str | None:
    brands = _ftyp_brands(header)
    if not brands:
        return None
    image_mime = _IMAGE_FTYP_BRANDS.get(brands[0])
    if image_mime:
        return image_mime
    if brands[0] == b"qt  ":
        return "video/quicktime"
    # Strict rule: only "mp4*" brands are MP4; other brands stay ambiguous
    if any(brand.startswith(b"mp4") for brand in brands):
        return "video/mp4"
    return None


def _sniff_ebml(header: bytes) -> str | None:
    if not header.startswith(b"\x1a\x45\xdf\xa3"):
        return None
    idx = header.find(b"\x42\x82")
    if idx < 0:
        return None
    doc_type = header[idx + 2:idx + 16]
    if b"webm" in doc_type:
        return "video/webm"
    if b"matroska" in doc_type:
        return "video/x-matroska"
    return None


def _sniff_header(header: bytes) -> str:
    for matches, mime in _SIGNATURES:
        if matches(header):
            return mime
    for sniffer in (_sniff_iso_media, _sniff_ebml):
        mime = sniffer(header)
        if mime:
            return mime
    if not any(b in _BINARY_BYTES for b in header):
        return "text/plain"
    return UNKNOWN_BINARY_MIME


def _sniff_with_pillow(path: str) -> str | None:
    try:
        with Image.open(path) as img:
            fmt = img.format or ""
            return Image.MIME.get(fmt.upper()) or img.get_format_mimetype()
    except Exception as exc:
        logger.debug("Pillow could not identify %s: %s", path, exc)
        return None


def read_header(path: str | Path, size: int = HEADER_SIZE) -> bytes:
    """Read up to `size` leading bytes, raising UnreadableFileError on any I/O failure."""
    try:
        with open(path, "rb") as fh:
            return fh.read(size)
    except OSError as exc:
        raise UnreadableFileError(f"{path}: cannot read file header: {exc}") from exc


def sniff_mime(path: str | Path) -> str:
    """
    Return the MIME type of a file based on its content.

    Resolution order:
      1. magic-byte signature table over the first 512 bytes
      2. ISO base-media override: ambiguous binary with `ftyp` at bytes 4-8 is `video/mp4`
      3. Pillow identification for raster formats the table does not know
    """
    header = read_header(path)
    mime = _sniff_header(header)
    if mime == UNKNOWN_BINARY_MIME and header[4:8] == b"ftyp":
        return "video/mp4"
    if mime == UNKNOWN_BINARY_MIME:
        return _sniff_with_pillow(str(path)) or UNKNOWN_BINARY_MIME
    return mime


def category_for_mime(mime: str) -> MediaCategory:
    value = (mime or "").strip().lower()
    if value == "image/gif":
        return MediaCategory.ANIMATED_IMAGE
    if value.startswith("video/"):
        return MediaCategory.VIDEO
    return MediaCategory.IMAGE


def classify(path: str | Path) -> tuple[MediaCategory, str]:
    """Classify a file into a thumbnail category and MIME type."""
    mime = sniff_mime(path)
    return category_for_mime(mime), mime
