"""
Media registry: the caller-supplied file list, classified once at startup.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Sequence

from ...shared import MediaCategory, OutOfRangeError, get_logger
from .sniffer import classify

logger = get_logger(__name__)


@dataclass(frozen=True)
class MediaEntry:
    filename: str
    path: str
    category: MediaCategory
    mime_type: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "type": self.mime_type,
            "category": self.category.value,
        }


class MediaRegistry:
    """Read-only, index-addressed list of media entries."""

    def __init__(self, entries: Iterable[MediaEntry]):
        self._entries: tuple[MediaEntry, ...] = tuple(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[MediaEntry]:
        return iter(self._entries)

    def get(self, index: int) -> MediaEntry:
        """Return the entry at `index`; negative or too-large indexes raise OutOfRangeError."""
        if index < 0 or index >= len(self._entries):
            raise OutOfRangeError(f"media index {index} out of range (0..{len(self._entries) - 1})")
        return self._entries[index]

    def to_list(self) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self._entries]


def build_entry(filename: str) -> MediaEntry:
    category, mime = classify(filename)
    return MediaEntry(
        filename=filename,
        path=os.path.abspath(filename),
        category=category,
        mime_type=mime,
    )


def build_registry(filenames: Sequence[str]) -> MediaRegistry:
    """
    Sniff every file and build the registry.

    Raises UnreadableFileError for the first file whose header cannot be read;
    startup treats that as fatal.
    """
    entries = [build_entry(str(name)) for name in filenames]
    logger.info("Registered %d media file(s)", len(entries))
    return MediaRegistry(entries)
