import json
import os
import stat
import sys
import textwrap
from pathlib import Path

import pytest

from repo_root import REPO_ROOT

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

# Keyframe packets of a 7-keyframe clip, with non-key packets interleaved
KEYFRAME_CSV = "0,K_\n2,__\n5,K_\n10,K_\n12,__\n15,K_\n20,K_\n25,K_\n30,K_\n"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
GIF_BYTES = b"GIF89a" + b"\x00" * 32
MP4_BYTES = b"\x00\x00\x00\x18ftypisom\x00\x00\x02\x00isomiso2" + b"\x00" * 32

_FFPROBE = '''
log("ffprobe")
if "format=duration" in " ".join(sys.argv):
    sys.stdout.write(DURATION)
else:
    sys.stdout.write(KEYFRAMES)
sys.exit(EXIT_CODE)
'''

_FFMPEG = '''
log("ffmpeg")
sys.stdout.buffer.write(b"\\x89PNG\\r\\n\\x1a\\nframe")
sys.stdout.flush()
sys.exit(EXIT_CODE)
'''

_MAGICK = '''
log("magick")
args = sys.argv[1:]
src = args[1]
if src == "-":
    data = sys.stdin.buffer.read()
else:
    with open(src, "rb") as fh:
        data = fh.read()
if EXIT_CODE:
    sys.exit(EXIT_CODE)
sys.stdout.buffer.write(b"\\xff\\xd8\\xff" + b"JPEG" + str(len(data)).encode() + b"\\xff\\xd9")
'''

_BODIES = {"ffprobe": _FFPROBE, "ffmpeg": _FFMPEG, "magick": _MAGICK}


class FakeTools:
    """Fake ffprobe/ffmpeg/magick executables that log their argv as JSON lines."""

    def __init__(self, root: Path):
        self.root = root
        self.log_path = root / "calls.jsonl"

    def install(
        self,
        name: str,
        *,
        exit_code: int = 0,
        keyframes: str = KEYFRAME_CSV,
        duration: str = "12.5\n",
    ) -> str:
        path = self.root / name
        header = textwrap.dedent(
            f'''\
            #!{sys.executable}
            import json
            import sys
            EXIT_CODE = {exit_code!r}
            KEYFRAMES = {keyframes!r}
            DURATION = {duration!r}

            def log(tool):
                with open({str(self.log_path)!r}, "a", encoding="utf-8") as fh:
                    fh.write(json.dumps({{"tool": tool, "argv": sys.argv[1:]}}) + "\\n")
            '''
        )
        path.write_text(header + textwrap.dedent(_BODIES[name]), encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    def install_all(self, **kwargs) -> dict[str, str]:
        return {name: self.install(name, **kwargs) for name in ("ffprobe", "ffmpeg", "magick")}

    def calls(self, tool: str | None = None) -> list[dict]:
        if not self.log_path.exists():
            return []
        rows = [json.loads(line) for line in self.log_path.read_text(encoding="utf-8").splitlines() if line]
        return [row for row in rows if tool is None or row["tool"] == tool]


@pytest.fixture
def fake_tools(tmp_path):
    if os.name != "posix":
        pytest.skip("fake tool executables need a POSIX shebang")
    root = tmp_path / "bin"
    root.mkdir()
    return FakeTools(root)


@pytest.fixture
def media_files(tmp_path):
    """Three files whose extensions lie about their content."""
    root = tmp_path / "media"
    root.mkdir()
    files = {
        "still.dat": PNG_BYTES,
        "anim.bin": GIF_BYTES,
        "clip.jpg": MP4_BYTES,
    }
    paths = []
    for name, data in files.items():
        path = root / name
        path.write_bytes(data)
        paths.append(str(path))
    return paths
