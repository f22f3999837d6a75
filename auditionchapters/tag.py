"""Reading and rewriting the ID3v2 tag at the head of an MP3 file."""

from __future__ import annotations

import os
import re
import shutil
import struct
import tempfile
from os import PathLike
from pathlib import Path

from .frames import (
    FRAME_HEADER_SIZE,
    Frame,
    UnknownFrame,
    _frame_bytes,
    _parse_chapter_frame,
    _synchsafe,
    _unsynchsafe,
    parse_text_frame,
)

_TAG_HEADER_SIZE = 10
_FRAME_ID = re.compile(rb"[A-Z0-9]{4}")


class ID3Error(Exception):
    """The ID3 tag could not be read."""


class ID3Tag:
    """The frames of one file's ID3v2 tag; save() rewrites it as ID3v2.4."""

    def __init__(self, path: str | PathLike[str], version: int = 4, audio_offset: int = 0):
        self.path = Path(path)
        self.version = version
        self._audio_offset = audio_offset
        self._frames: dict[str, list[Frame]] = {}

    def get_frames(self, frame_id: str) -> list[Frame]:
        return list(self._frames.get(frame_id, ()))

    def delete_frames(self, frame_id: str) -> None:
        self._frames.pop(frame_id, None)

    def add_frame(self, frame_id: str, frame: Frame) -> None:
        if not _FRAME_ID.fullmatch(frame_id.encode("latin-1", errors="replace")):
            raise ValueError(f"invalid frame ID {frame_id!r}")
        self._frames.setdefault(frame_id, []).append(frame)

    def save(self) -> None:
        """Write the tag followed by the file's original audio data."""
        body = b"".join(
            _frame_bytes(frame_id, frame)
            for frame_id, frames in self._frames.items()
            for frame in frames
        )
        head = b"ID3\x04\x00\x00" + _synchsafe(len(body)) + body if body else b""

        handle = tempfile.NamedTemporaryFile(
            dir=self.path.parent, prefix=self.path.name, suffix=".part", delete=False
        )
        try:
            with handle, self.path.open("rb") as source:
                handle.write(head)
                source.seek(self._audio_offset)
                shutil.copyfileobj(source, handle)
            shutil.copymode(self.path, handle.name)
            os.replace(handle.name, self.path)
        except BaseException:
            Path(handle.name).unlink(missing_ok=True)
            raise

        self.version = 4
        self._audio_offset = len(head)


def _parse_frame(frame_id: bytes, body: bytes, version: int) -> Frame:
    try:
        if frame_id == b"CHAP":
            return _parse_chapter_frame(body, version)
        if frame_id.startswith(b"T") and frame_id != b"TXXX":
            return parse_text_frame(body)
    except ValueError as exc:
        raise ID3Error(f"malformed {frame_id.decode('ascii')} frame: {exc}") from exc
    return UnknownFrame(body)


def open_tag(path: str | PathLike[str]) -> ID3Tag:
    """Read the ID3v2 tag of a file; a file without one gives an empty tag."""
    path = Path(path)
    with path.open("rb") as handle:
        header = handle.read(_TAG_HEADER_SIZE)
        if len(header) < _TAG_HEADER_SIZE or header[:3] != b"ID3":
            return ID3Tag(path)
        major = header[3]
        if major not in (3, 4):
            raise ID3Error(f"unsupported ID3v2 version 2.{major}")
        flags = header[5]
        size = _unsynchsafe(header[6:10])
        data = handle.read(size)

    if len(data) < size:
        raise ID3Error("ID3 tag is truncated")

    audio_offset = _TAG_HEADER_SIZE + size
    if major == 4 and flags & 0x10:
        audio_offset += _TAG_HEADER_SIZE

    pos = 0
    if flags & 0x40:
        if len(data) < 4:
            raise ID3Error("extended header is truncated")
        if major == 4:
            pos = _unsynchsafe(data[:4])
        else:
            pos = 4 + struct.unpack(">I", data[:4])[0]

    tag = ID3Tag(path, version=major, audio_offset=audio_offset)
    while pos + FRAME_HEADER_SIZE <= len(data):
        frame_id = data[pos:pos + 4]
        if not _FRAME_ID.fullmatch(frame_id):
            break
        raw_size = data[pos + 4:pos + 8]
        frame_size = _unsynchsafe(raw_size) if major == 4 else struct.unpack(">I", raw_size)[0]
        start = pos + FRAME_HEADER_SIZE
        body = data[start:start + frame_size]
        if len(body) < frame_size:
            raise ID3Error(f"frame {frame_id.decode('ascii')} is truncated")
        pos = start + frame_size
        tag.add_frame(frame_id.decode("ascii"), _parse_frame(frame_id, body, major))
    return tag