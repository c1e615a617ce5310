import pytest

from ibiv_backend.routes.core import request_json as rq


class _DummyContent:
    def __init__(self, chunks, exc=None):
        self._chunks = chunks
        self._exc = exc

    async def iter_chunked(self, _size):
        if self._exc is not None:
            raise self._exc
        for chunk in self._chunks:
            yield chunk


class _DummyRequest:
    def __init__(self, headers=None, chunks=None, exc=None):
        self.headers = headers or {}
        self.content = _DummyContent(chunks or [], exc=exc)


def test_max_json_bytes_env(monkeypatch) -> None:
    monkeypatch.setenv("IBIV_MAX_JSON_SIZE", "2048")
    assert rq._max_json_bytes() == 2048
    monkeypatch.setenv("IBIV_MAX_JSON_SIZE", "bad")
    assert rq._max_json_bytes() == rq.DEFAULT_MAX_JSON_BYTES


def test_content_length_error() -> None:
    assert rq._content_length_error(_DummyRequest(headers={"Content-Length": "999"}), 100) is not None
    assert rq._content_length_error(_DummyRequest(headers={"Content-Length": "10"}), 100) is None
    assert rq._content_length_error(_DummyRequest(headers={}), 100) is None


def test_decode_and_parse_json_dict() -> None:
    ok = rq._decode_and_parse_json_dict(b'{"cmd":["ls"]}')
    assert ok.ok and ok.data == {"cmd": ["ls"]}
    assert not rq._decode_and_parse_json_dict(b"\xff").ok
    assert not rq._decode_and_parse_json_dict(b"{").ok
    assert not rq._decode_and_parse_json_dict(b"[]").ok


@pytest.mark.asyncio
async def test_read_json_limits_and_errors() -> None:
    ok = await rq._read_json(_DummyRequest(chunks=[b'{"a":', b"1}"]))
    assert ok.ok and ok.data == {"a": 1}

    too_big = await rq._read_json(_DummyRequest(chunks=[b"x" * 2048]), max_bytes=1024)
    assert not too_big.ok
    assert too_big.code == "INVALID_INPUT"

    broken = await rq._read_json(_DummyRequest(exc=OSError("reset")))
    assert not broken.ok
    assert broken.code == "INVALID_JSON"
