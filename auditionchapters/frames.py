"""ID3v2 frame types used for chapter tagging."""

from __future__ import annotations

import io
import struct
from dataclasses import dataclass, field
from datetime import timedelta
from typing import BinaryIO, Union

ENCODING_ISO = 0
ENCODING_UTF16 = 1
ENCODING_UTF16BE = 2
ENCODING_UTF8 = 3

IGNORED_OFFSET = 0xFFFFFFFF
FRAME_HEADER_SIZE = 10

_TERMINATORS = {
    ENCODING_ISO: b"\x00",
    ENCODING_UTF16: b"\x00\x00",
    ENCODING_UTF16BE: b"\x00\x00",
    ENCODING_UTF8: b"\x00",
}


def _synchsafe(value: int) -> bytes:
    if not 0 <= value < 1 << 28:
        raise ValueError(f"size {value} does not fit a synchsafe integer")
    return bytes((value >> shift) & 0x7F for shift in (21, 14, 7, 0))


def _unsynchsafe(data: bytes) -> int:
    value = 0
    for byte in data:
        value = (value << 7) | (byte & 0x7F)
    return value


def _encode_text(text: str, encoding: int) -> bytes:
    if encoding == ENCODING_ISO:
        return text.encode("latin-1", errors="replace")
    if encoding == ENCODING_UTF16:
        return b"\xff\xfe" + text.encode("utf-16-le")
    if encoding == ENCODING_UTF16BE:
        return text.encode("utf-16-be")
    if encoding == ENCODING_UTF8:
        return text.encode("utf-8")
    raise ValueError(f"unknown text encoding {encoding}")


def _decode_text(data: bytes, encoding: int) -> str:
    if encoding == ENCODING_ISO:
        return data.decode("latin-1")
    if encoding == ENCODING_UTF16:
        return data.decode("utf-16", errors="replace")
    if encoding == ENCODING_UTF16BE:
        return data.decode("utf-16-be", errors="replace")
    return data.decode("utf-8", errors="replace")


def _frame_bytes(frame_id: str, frame: "Frame") -> bytes:
    body = frame.to_bytes()
    return frame_id.encode("latin-1") + _synchsafe(len(body)) + b"\x00\x00" + body


def _milliseconds(value: timedelta) -> int:
    return (value // timedelta(milliseconds=1)) & 0xFFFFFFFF


@dataclass
class TextFrame:
    """A text information frame such as TIT2."""

    text: str
    encoding: int = ENCODING_UTF8

    def size(self) -> int:
        return 1 + len(_encode_text(self.text, self.encoding)) + len(_TERMINATORS[self.encoding])

    def to_bytes(self) -> bytes:
        return (
            bytes([self.encoding])
            + _encode_text(self.text, self.encoding)
            + _TERMINATORS[self.encoding]
        )


@dataclass
class ChapterFrame:
    """A CHAP frame; an end time of None and offsets of IGNORED_OFFSET mean unset."""

    element_id: str
    start_time: timedelta
    end_time: timedelta | None = None
    start_offset: int = IGNORED_OFFSET
    end_offset: int = IGNORED_OFFSET
    title: TextFrame | None = None
    description: TextFrame | None = None

    def size(self) -> int:
        return len(self.to_bytes())

    def to_bytes(self) -> bytes:
        end = IGNORED_OFFSET if self.end_time is None else _milliseconds(self.end_time)
        parts = [
            self.element_id.encode("latin-1", errors="replace"),
            b"\x00",
            struct.pack(
                ">IIII",
                _milliseconds(self.start_time),
                end,
                self.start_offset & 0xFFFFFFFF,
                self.end_offset & 0xFFFFFFFF,
            ),
        ]
        if self.title is not None:
            parts.append(_frame_bytes("TIT2", self.title))
        if self.description is not None:
            parts.append(_frame_bytes("TIT3", self.description))
        return b"".join(parts)


@dataclass
class CTOCFrame:
    """A CTOC table-of-contents frame listing child element IDs."""

    element_id: str
    is_top_level: bool = False
    is_ordered: bool = False
    child_ids: list[str] = field(default_factory=list)
    title: TextFrame | None = None

    def size(self) -> int:
        size = len(self.element_id.encode("latin-1", errors="replace")) + 1 + 1 + 1
        size += sum(len(child.encode("latin-1", errors="replace")) + 1 for child in self.child_ids)
        if self.title is not None:
            size += FRAME_HEADER_SIZE + self.title.size()
        return size

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        self.write_to(buffer)
        return buffer.getvalue()

    def write_to(self, stream: BinaryIO) -> int:
        """Write the frame body to a binary stream and return the byte count."""
        flags = (1 if self.is_top_level else 0) | (2 if self.is_ordered else 0)
        parts = [
            self.element_id.encode("latin-1", errors="replace") + b"\x00",
            bytes([flags, len(self.child_ids) & 0xFF]),
        ]
        parts.extend(child.encode("latin-1", errors="replace") + b"\x00" for child in self.child_ids)
        if self.title is not None:
            parts.append(b"TIT2" + struct.pack(">I", self.title.size() & 0xFFFFFFFF) + b"\x00\x00")
            parts.append(self.title.to_bytes())
        data = b"".join(parts)
        stream.write(data)
        return len(data)


@dataclass
class UnknownFrame:
    """A frame kept as its raw body."""

    body: bytes = b""

    def size(self) -> int:
        return len(self.body)

    def to_bytes(self) -> bytes:
        return bytes(self.body)


Frame = Union[TextFrame, ChapterFrame, CTOCFrame, UnknownFrame]


def create_ctoc_frame(
    element_id: str,
    is_top_level: bool,
    is_ordered: bool,
    child_ids: list[str],
    title: str,
) -> CTOCFrame:
    """Build a CTOC frame, with a UTF-8 title subframe when a title is given."""
    return CTOCFrame(
        element_id=element_id,
        is_top_level=is_top_level,
        is_ordered=is_ordered,
        child_ids=list(child_ids),
        title=TextFrame(title, ENCODING_UTF8) if title else None,
    )


def parse_text_frame(body: bytes) -> TextFrame:
    """Decode the body of a text information frame."""
    if not body:
        raise ValueError("text frame is empty")
    encoding = body[0]
    if encoding not in _TERMINATORS:
        raise ValueError(f"unknown text encoding {encoding}")
    return TextFrame(_decode_text(body[1:], encoding).rstrip("\x00"), encoding)


def _parse_chapter_frame(body: bytes, version: int) -> ChapterFrame:
    id_end = body.find(b"\x00")
    if id_end < 0:
        raise ValueError("chapter element ID is not terminated")
    pos = id_end + 1
    if len(body) < pos + 16:
        raise ValueError("chapter frame is too short")
    start_ms, end_ms, start_offset, end_offset = struct.unpack_from(">IIII", body, pos)
    pos += 16

    title = description = None
    while pos + FRAME_HEADER_SIZE <= len(body):
        sub_id = body[pos:pos + 4]
        if sub_id[0] == 0:
            break
        raw_size = body[pos + 4:pos + 8]
        size = _unsynchsafe(raw_size) if version == 4 else struct.unpack(">I", raw_size)[0]
        sub_body = body[pos + FRAME_HEADER_SIZE:pos + FRAME_HEADER_SIZE + size]
        pos += FRAME_HEADER_SIZE + size
        if sub_id == b"TIT2":
            title = parse_text_frame(sub_body)
        elif sub_id == b"TIT3":
            description = parse_text_frame(sub_body)

    return ChapterFrame(
        element_id=body[:id_end].decode("latin-1"),
        start_time=timedelta(milliseconds=start_ms),
        end_time=None if end_ms == IGNORED_OFFSET else timedelta(milliseconds=end_ms),
        start_offset=start_offset,
        end_offset=end_offset,
        title=title,
        description=description,
    )


def parse_chapter_frame(body: bytes) -> ChapterFrame:
    """Decode the body of an ID3v2.4 CHAP frame."""
    return _parse_chapter_frame(body, 4)