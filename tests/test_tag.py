from datetime import timedelta

import pytest

from auditionchapters.frames import (
    ChapterFrame,
    TextFrame,
    UnknownFrame,
    create_ctoc_frame,
)
from auditionchapters.tag import ID3Error, open_tag

AUDIO = b"\xff\xfb\x90\x00" + bytes(range(32))


def _mp3(tmp_path, content=AUDIO):
    path = tmp_path / "episode.mp3"
    path.write_bytes(content)
    return path


def _v23_with_title(title):
    frame_body = b"\x00" + title
    frame = b"TIT2" + len(frame_body).to_bytes(4, "big") + b"\x00\x00" + frame_body
    return b"ID3\x03\x00\x00" + bytes([0, 0, 0, len(frame)]) + frame


def test_file_without_tag_has_no_frames(tmp_path):
    tag = open_tag(_mp3(tmp_path))
    assert tag.get_frames("CHAP") == []


def test_save_and_reopen_round_trip(tmp_path):
    path = _mp3(tmp_path)
    tag = open_tag(path)
    chapter = ChapterFrame("chp0", timedelta(seconds=5), title=TextFrame("Intro"))
    tag.add_frame("CHAP", chapter)
    tag.save()

    reopened = open_tag(path)
    assert reopened.get_frames("CHAP") == [chapter]
    assert reopened.version == 4
    assert path.read_bytes().startswith(b"ID3\x04")
    assert path.read_bytes().endswith(AUDIO)


def test_ctoc_is_kept_as_raw_body(tmp_path):
    path = _mp3(tmp_path)
    tag = open_tag(path)
    ctoc = create_ctoc_frame("toc", True, True, ["chp0"], "Table of Contents")
    tag.add_frame("CTOC", ctoc)
    tag.save()
    assert open_tag(path).get_frames("CTOC") == [UnknownFrame(ctoc.to_bytes())]


def test_reads_version_three_text_frame(tmp_path):
    path = _mp3(tmp_path, _v23_with_title(b"Song") + AUDIO)
    tag = open_tag(path)
    assert tag.version == 3
    assert tag.get_frames("TIT2") == [TextFrame("Song", 0)]


def test_saving_converts_to_version_four(tmp_path):
    path = _mp3(tmp_path, _v23_with_title(b"Song") + AUDIO)
    tag = open_tag(path)
    tag.save()
    reopened = open_tag(path)
    assert reopened.version == 4
    assert reopened.get_frames("TIT2") == [TextFrame("Song", 0)]
    assert path.read_bytes().endswith(AUDIO)


def test_deleting_all_frames_leaves_only_audio(tmp_path):
    path = _mp3(tmp_path, _v23_with_title(b"Song") + AUDIO)
    tag = open_tag(path)
    tag.delete_frames("TIT2")
    assert tag.get_frames("TIT2") == []
    tag.save()
    assert path.read_bytes() == AUDIO


def test_repeated_saves_are_stable(tmp_path):
    path = _mp3(tmp_path)
    tag = open_tag(path)
    tag.add_frame("CHAP", ChapterFrame("chp0", timedelta(0), title=TextFrame("A")))
    tag.save()
    first = path.read_bytes()
    tag.save()
    assert path.read_bytes() == first
    open_tag(path).save()
    assert path.read_bytes() == first


def test_delete_frames_only_removes_given_id(tmp_path):
    tag = open_tag(_mp3(tmp_path))
    tag.add_frame("CHAP", ChapterFrame("chp0", timedelta(0)))
    tag.add_frame("TIT2", TextFrame("Show"))
    tag.delete_frames("CHAP")
    assert tag.get_frames("CHAP") == []
    assert tag.get_frames("TIT2") == [TextFrame("Show")]


def test_get_frames_returns_copy(tmp_path):
    tag = open_tag(_mp3(tmp_path))
    tag.add_frame("TIT2", TextFrame("Show"))
    tag.get_frames("TIT2").clear()
    assert len(tag.get_frames("TIT2")) == 1


def test_invalid_frame_id(tmp_path):
    tag = open_tag(_mp3(tmp_path))
    with pytest.raises(ValueError):
        tag.add_frame("chap", UnknownFrame(b""))


def test_unsupported_version(tmp_path):
    path = _mp3(tmp_path, b"ID3\x02\x00\x00\x00\x00\x00\x00" + AUDIO)
    with pytest.raises(ID3Error, match="unsupported"):
        open_tag(path)


def test_truncated_tag(tmp_path):
    path = _mp3(tmp_path, b"ID3\x04\x00\x00\x00\x00\x7f\x7f" + b"TIT2")
    with pytest.raises(ID3Error, match="truncated"):
        open_tag(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        open_tag(tmp_path / "missing.mp3")