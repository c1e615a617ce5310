import pytest

from ibiv_backend.adapters.tools import FFProbe
from ibiv_backend.features.thumbnails import (
    KeyframeSelector,
    parse_duration,
    parse_keyframe_pts,
    select_keyframe_index,
    select_keyframe_pts,
)
from ibiv_backend.shared import DurationParseError, NoKeyframesError, ProbeError, SeekTarget


def _stub_probe(keyframes: str = "", duration: str = "") -> FFProbe:
    probe = FFProbe.__new__(FFProbe)
    probe.bin = "ffprobe"
    probe.timeout = 1.0
    probe._resolved_bin = "ffprobe"
    probe._available = True
    calls: list[str] = []
    probe.calls = calls  # type: ignore[attr-defined]

    async def _list_keyframes(path):
        calls.append("keyframes")
        return keyframes

    async def _read_duration(path):
        calls.append("duration")
        return duration

    probe.list_keyframes = _list_keyframes  # type: ignore[method-assign]
    probe.read_duration = _read_duration  # type: ignore[method-assign]
    return probe


def test_parse_keyframe_pts_keeps_only_keyframes() -> None:
    output = "0,K_\n3,__\n5,K_\nwarning: junk\n5,K_\n12,K_D\n8,__\n"
    assert parse_keyframe_pts(output) == (0, 5, 12)
    assert parse_keyframe_pts("") == ()
    assert parse_keyframe_pts("1,__\n2,__\n") == ()


def test_parse_keyframe_pts_sorts_out_of_order_packets() -> None:
    assert parse_keyframe_pts("30,K_\n0,K_\n10,K_\n") == (0, 10, 30)


@pytest.mark.parametrize(
    "count, expected",
    [(1, 0), (2, 0), (3, 1), (4, 1), (6, 1), (7, 2), (10, 3), (100, 33)],
)
def test_select_keyframe_index(count, expected) -> None:
    assert select_keyframe_index(count) == expected


def test_select_keyframe_index_rejects_empty() -> None:
    with pytest.raises(NoKeyframesError):
        select_keyframe_index(0)


def test_select_keyframe_pts_tertile() -> None:
    assert select_keyframe_pts([0, 5, 10, 15, 20, 25, 30]) == 10
    assert select_keyframe_pts([42]) == 42
    assert select_keyframe_pts([0, 90, 180]) == 90


def test_parse_duration() -> None:
    assert parse_duration("12.500000\n") == 12.5
    for bad in ("", "N/A", "nan", "-3"):
        with pytest.raises(DurationParseError):
            parse_duration(bad)


@pytest.mark.asyncio
async def test_selector_keyframes_strategy() -> None:
    probe = _stub_probe(keyframes="0,K_\n5,K_\n10,K_\n15,K_\n20,K_\n25,K_\n30,K_\n")
    target = await KeyframeSelector(probe).select_timestamp("/media/clip.mp4")
    assert target == SeekTarget(10, "pts")


@pytest.mark.asyncio
async def test_selector_raises_without_keyframes() -> None:
    probe = _stub_probe(keyframes="0,__\n")
    with pytest.raises(NoKeyframesError) as info:
        await KeyframeSelector(probe).select_timestamp("/media/clip.mp4")
    assert isinstance(info.value, ProbeError)


@pytest.mark.asyncio
async def test_selector_duration_strategy() -> None:
    probe = _stub_probe(duration="20.0\n")
    target = await KeyframeSelector(probe, strategy="duration").select_timestamp("/media/clip.mp4")
    assert target == SeekTarget(4.0, "seconds")
    assert probe.calls == ["duration"]  # type: ignore[attr-defined]


def test_selector_rejects_unknown_strategy() -> None:
    with pytest.raises(ValueError):
        KeyframeSelector(_stub_probe(), strategy="middle")
