"""Writing chapter markers into the ID3v2 tag of an MP3 file."""

from __future__ import annotations

import os
import shutil
import sys
from collections.abc import Callable, Iterable
from datetime import timedelta
from os import PathLike

from .csvparser import MarkerEntry
from .frames import (
    ENCODING_UTF8,
    IGNORED_OFFSET,
    ChapterFrame,
    TextFrame,
    create_ctoc_frame,
)
from .tag import ID3Error, ID3Tag, open_tag

TOC_ELEMENT_ID = "toc"
TOC_TITLE = "Table of Contents"
OUTPUT_SUFFIX = "_with_chapters"


class OperationCancelled(Exception):
    """The user declined to go on, or no answer could be read."""


def confirm_operation(prompt: str) -> None:
    """Ask a yes/no question on the terminal; raise unless the answer is yes."""
    sys.stdout.write(prompt)
    sys.stdout.flush()
    response = sys.stdin.readline()
    if not response.endswith("\n"):
        raise OperationCancelled("Error reading input: EOF")
    if response.strip().lower() not in ("y", "yes"):
        raise OperationCancelled("Operation cancelled by user")


def _extension(path: str) -> str:
    tail = path.rsplit(os.sep, 1)[-1]
    if os.altsep:
        tail = tail.rsplit(os.altsep, 1)[-1]
    dot = tail.rfind(".")
    return tail[dot:] if dot >= 0 else ""


def generate_output_path(input_path: str | PathLike[str]) -> str:
    """Insert the chapters suffix before the extension of the input path."""
    path = os.fspath(input_path)
    ext = _extension(path)
    return path[: len(path) - len(ext)] + OUTPUT_SUFFIX + ext


def create_chapter_frame(element_id: str, title: str, start_time: timedelta) -> ChapterFrame:
    """Build a CHAP frame with only a start time and a UTF-8 title."""
    return ChapterFrame(
        element_id=element_id,
        start_time=start_time,
        end_time=None,
        start_offset=IGNORED_OFFSET,
        end_offset=IGNORED_OFFSET,
        title=TextFrame(title, ENCODING_UTF8),
    )


def add_chapter_frames(tag: ID3Tag, markers: Iterable[MarkerEntry]) -> None:
    """Replace the tag's chapters and table of contents with the given markers."""
    tag.delete_frames("CHAP")
    tag.delete_frames("CTOC")

    element_ids: list[str] = []
    for index, marker in enumerate(markers):
        if not marker.name.strip():
            continue
        element_id = f"chp{index}"
        element_ids.append(element_id)
        tag.add_frame("CHAP", create_chapter_frame(element_id, marker.name, marker.start_time))

    if element_ids:
        tag.add_frame(
            "CTOC", create_ctoc_frame(TOC_ELEMENT_ID, True, True, element_ids, TOC_TITLE)
        )


def _open(path: str, label: str) -> ID3Tag:
    try:
        return open_tag(path)
    except (OSError, ID3Error) as exc:
        raise ID3Error(f"{label}: {exc}") from exc


def _add_in_place(
    mp3_path: str, markers: list[MarkerEntry], confirm: Callable[[str], object]
) -> None:
    confirm(f"This will modify the original file '{mp3_path}'. Continue? (y/n): ")
    tag = _open(mp3_path, "Cannot open MP3 file")
    add_chapter_frames(tag, markers)
    tag.save()


def _add_to_new_file(
    mp3_path: str,
    markers: list[MarkerEntry],
    output_path: str,
    confirm: Callable[[str], object],
) -> None:
    try:
        os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    except OSError as exc:
        raise OSError(f"Failed to create output directory: {exc}") from exc

    if os.path.exists(output_path):
        confirm(f"File '{output_path}' already exists. Overwrite? (y/n): ")

    temp_path = output_path + ".tmp"
    try:
        shutil.copyfile(mp3_path, temp_path)
        tag = _open(temp_path, "Cannot open temporary file")
        add_chapter_frames(tag, markers)
        tag.save()
        os.replace(temp_path, output_path)
    finally:
        if os.path.exists(temp_path):
            os.remove(temp_path)


def add_chapters(
    mp3_path: str | PathLike[str],
    markers: Iterable[MarkerEntry],
    output_path: str | PathLike[str] | None = None,
    confirm: Callable[[str], object] = confirm_operation,
) -> str:
    """Write chapter frames for the markers; return the path that was written.

    Without an output path the result goes next to the input with a
    ``_with_chapters`` suffix. ``confirm`` is called with a prompt before an
    existing file is changed and raises OperationCancelled to refuse.
    """
    source = os.fspath(mp3_path)
    target = os.fspath(output_path) if output_path else generate_output_path(source)
    marker_list = list(markers)
    if source == target:
        _add_in_place(source, marker_list, confirm)
    else:
        _add_to_new_file(source, marker_list, target, confirm)
    return target