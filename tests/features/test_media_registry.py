import os

import pytest

from ibiv_backend.features.media import build_registry
from ibiv_backend.shared import MediaCategory, OutOfRangeError, UnreadableFileError


def test_registry_lists_entries_in_order(media_files) -> None:
    registry = build_registry(media_files)
    assert len(registry) == 3
    listing = registry.to_list()
    assert [item["type"] for item in listing] == ["image/png", "image/gif", "video/mp4"]
    assert [item["category"] for item in listing] == ["image", "animated_image", "video"]
    assert listing[0]["filename"] == media_files[0]


def test_registry_get_bounds(media_files) -> None:
    registry = build_registry(media_files)
    entry = registry.get(2)
    assert entry.category is MediaCategory.VIDEO
    assert os.path.isabs(entry.path)
    for index in (-1, 3, 7):
        with pytest.raises(OutOfRangeError):
            registry.get(index)


def test_registry_rejects_unreadable_file(media_files, tmp_path) -> None:
    with pytest.raises(UnreadableFileError):
        build_registry(media_files + [str(tmp_path / "gone.mp4")])


def test_empty_registry() -> None:
    registry = build_registry([])
    assert len(registry) == 0
    assert registry.to_list() == []
    with pytest.raises(OutOfRangeError):
        registry.get(0)
