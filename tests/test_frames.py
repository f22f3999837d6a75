import io
import struct
from datetime import timedelta

import pytest

from auditionchapters.frames import (
    ENCODING_ISO,
    ENCODING_UTF8,
    ENCODING_UTF16,
    ENCODING_UTF16BE,
    IGNORED_OFFSET,
    ChapterFrame,
    CTOCFrame,
    TextFrame,
    UnknownFrame,
    create_ctoc_frame,
    parse_chapter_frame,
    parse_text_frame,
)


def test_utf8_text_frame_bytes():
    frame = TextFrame("Hi")
    assert frame.to_bytes() == b"\x03Hi\x00"
    assert frame.size() == len(frame.to_bytes())


@pytest.mark.parametrize("encoding", [ENCODING_ISO, ENCODING_UTF16, ENCODING_UTF16BE, ENCODING_UTF8])
def test_text_frame_round_trip(encoding):
    frame = TextFrame("Chapter One", encoding)
    assert parse_text_frame(frame.to_bytes()) == frame
    assert frame.size() == len(frame.to_bytes())


def test_parse_empty_text_frame():
    with pytest.raises(ValueError):
        parse_text_frame(b"")


def test_parse_text_frame_unknown_encoding():
    with pytest.raises(ValueError, match="encoding"):
        parse_text_frame(b"\x09abc")


def test_chapter_frame_layout():
    frame = ChapterFrame("chp0", timedelta(milliseconds=1500))
    data = frame.to_bytes()
    assert data.startswith(b"chp0\x00")
    assert data[5:9] == (1500).to_bytes(4, "big")
    assert data[9:21] == struct.pack(">III", IGNORED_OFFSET, IGNORED_OFFSET, IGNORED_OFFSET)
    assert frame.size() == len(data)


def test_chapter_frame_title_subframe():
    frame = ChapterFrame("chp1", timedelta(seconds=2), title=TextFrame("Intro"))
    data = frame.to_bytes()
    title = TextFrame("Intro").to_bytes()
    assert data.endswith(b"TIT2" + bytes([0, 0, 0, len(title)]) + b"\x00\x00" + title)


def test_chapter_frame_round_trip():
    frame = ChapterFrame(
        "chp2",
        timedelta(seconds=75, milliseconds=250),
        end_time=timedelta(seconds=90),
        title=TextFrame("Middle"),
        description=TextFrame("Details", ENCODING_ISO),
    )
    assert parse_chapter_frame(frame.to_bytes()) == frame


def test_chapter_frame_unset_end_round_trip():
    frame = ChapterFrame("chp3", timedelta(0), title=TextFrame("Start"))
    parsed = parse_chapter_frame(frame.to_bytes())
    assert parsed.end_time is None
    assert parsed == frame


def test_parse_chapter_without_terminator():
    with pytest.raises(ValueError):
        parse_chapter_frame(b"chp0")


def test_parse_chapter_too_short():
    with pytest.raises(ValueError, match="too short"):
        parse_chapter_frame(b"chp0\x00\x00\x00")


def test_ctoc_frame_layout():
    frame = create_ctoc_frame("toc", True, True, ["chp0", "chp1"], "Table of Contents")
    data = frame.to_bytes()
    assert data.startswith(b"toc\x00\x03\x02chp0\x00chp1\x00TIT2")
    title = TextFrame("Table of Contents").to_bytes()
    assert data.endswith(len(title).to_bytes(4, "big") + b"\x00\x00" + title)
    assert frame.size() == len(data)


def test_ctoc_without_title():
    frame = create_ctoc_frame("toc", False, False, [], "")
    assert frame.title is None
    assert frame.to_bytes() == b"toc\x00\x00\x00"
    assert frame.size() == len(frame.to_bytes())


@pytest.mark.parametrize(
    ("top", "ordered", "flags"),
    [(True, False, 1), (False, True, 2), (True, True, 3), (False, False, 0)],
)
def test_ctoc_flags(top, ordered, flags):
    frame = CTOCFrame("t", is_top_level=top, is_ordered=ordered)
    assert frame.to_bytes()[2] == flags


def test_ctoc_write_to_matches_to_bytes():
    frame = create_ctoc_frame("toc", True, False, ["a", "bb"], "Contents")
    stream = io.BytesIO()
    written = frame.write_to(stream)
    assert written == len(stream.getvalue())
    assert stream.getvalue() == frame.to_bytes()


def test_unknown_frame():
    frame = UnknownFrame(b"\x01\x02\x03")
    assert frame.to_bytes() == b"\x01\x02\x03"
    assert frame.size() == 3