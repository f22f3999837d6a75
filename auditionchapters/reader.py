"""Reading chapters and the table of contents back from an MP3 file."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from os import PathLike

from .frames import ChapterFrame, CTOCFrame, UnknownFrame
from .tag import ID3Error, ID3Tag, open_tag

_TITLE_LIMIT = 50


@dataclass(frozen=True)
class Chapter:
    """A chapter found in a file's tag."""

    title: str
    start_time: timedelta


@dataclass
class CTOCInfo:
    """What a CTOC frame says about the table of contents."""

    title: str = ""
    is_top_level: bool = False
    is_ordered: bool = False
    child_ids: list[str] = field(default_factory=list)


def _open(mp3_path: str | PathLike[str]) -> ID3Tag:
    try:
        return open_tag(mp3_path)
    except (OSError, ID3Error) as exc:
        raise ID3Error(f"Cannot open MP3 file: {exc}") from exc


def read_chapters(mp3_path: str | PathLike[str]) -> list[Chapter]:
    """Return the file's chapters ordered by start time."""
    chapters = [
        Chapter(frame.title.text if frame.title is not None else "", frame.start_time)
        for frame in _open(mp3_path).get_frames("CHAP")
        if isinstance(frame, ChapterFrame)
    ]
    return sorted(chapters, key=lambda chapter: chapter.start_time)


def read_toc(mp3_path: str | PathLike[str]) -> CTOCInfo:
    """Return the information held in the file's first CTOC frame."""
    frames = _open(mp3_path).get_frames("CTOC")
    if not frames:
        raise ID3Error("No CTOC frame found")
    frame = frames[0]
    if not isinstance(frame, (UnknownFrame, CTOCFrame)):
        raise ID3Error("Cannot parse CTOC frame")
    return extract_ctoc_info(frame.to_bytes())


def _child_ids(data: bytes, count: int) -> list[str]:
    ids: list[str] = []
    pos = 0
    while len(ids) < count and pos < len(data):
        end = data.find(b"\x00", pos)
        if end < 0:
            break
        ids.append(data[pos:end].decode("utf-8", errors="replace"))
        pos = end + 1
    return ids


def _title(data: bytes, start: int) -> str:
    index = data.find(b"TIT2", max(start, 0))
    if index < 0 or index >= len(data) - 4:
        return ""
    text_pos = index + 10
    if text_pos >= len(data):
        return ""
    encoding = data[text_pos]
    text_pos += 1
    text = data[text_pos:]
    if encoding not in (0, 3):
        text = text[:_TITLE_LIMIT]
    return text.split(b"\x00", 1)[0].decode("utf-8", errors="replace")


def extract_ctoc_info(body: bytes) -> CTOCInfo:
    """Decode the body of a CTOC frame."""
    if len(body) < 3:
        raise ID3Error("CTOC frame data is incomplete")
    id_end = body.find(b"\x00")
    if id_end < 0:
        raise ID3Error("ElementID not found in CTOC frame")
    flags_pos = id_end + 1
    count_pos = flags_pos + 1
    if len(body) <= count_pos:
        raise ID3Error("Insufficient data length in CTOC frame")

    flags = body[flags_pos]
    child_ids = _child_ids(body[count_pos + 1:], body[count_pos])
    return CTOCInfo(
        title=_title(body, count_pos + 1 + len(child_ids) * 2),
        is_top_level=bool(flags & 1),
        is_ordered=bool(flags & 2),
        child_ids=child_ids,
    )


def _trunc_div(value: int, divisor: int) -> int:
    quotient = abs(value) // divisor
    return -quotient if value < 0 else quotient


def _trunc_mod(value: int, divisor: int) -> int:
    return value - divisor * _trunc_div(value, divisor)


def format_duration(duration: timedelta) -> str:
    """Format a duration as H:MM:SS.mmm, or M:SS.mmm below one hour."""
    micros = duration // timedelta(microseconds=1)
    hours = _trunc_div(micros, 3_600_000_000)
    minutes = _trunc_mod(_trunc_div(micros, 60_000_000), 60)
    seconds = _trunc_mod(_trunc_div(micros, 1_000_000), 60)
    millis = _trunc_mod(_trunc_div(micros, 1_000), 1000)
    if hours > 0:
        return "%d:%02d:%02d.%03d" % (hours, minutes, seconds, millis)
    return "%d:%02d.%03d" % (minutes, seconds, millis)