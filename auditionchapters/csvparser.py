"""Reading of Adobe Audition marker lists exported as tab-separated text."""

from __future__ import annotations

import csv
import re
from dataclasses import dataclass
from datetime import timedelta
from os import PathLike

_FLOAT = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class MarkerEntry:
    """A single chapter marker: its title and where it starts."""

    name: str
    start_time: timedelta


class CSVFormatError(ValueError):
    """The marker file could not be read or does not have the expected layout."""


def _parse_float(text: str) -> float:
    if not _FLOAT.fullmatch(text):
        raise ValueError(f'invalid number "{text}"')
    return float(text)


def _component(text: str, label: str) -> float:
    try:
        return _parse_float(text)
    except ValueError as exc:
        raise ValueError(f"Invalid {label} format: {exc}") from exc


def _seconds(total: float) -> timedelta:
    try:
        return timedelta(seconds=total)
    except OverflowError as exc:
        raise ValueError(f"time value out of range: {total}") from exc


def parse_time_string(text: str) -> timedelta:
    """Convert decimal seconds, MM:SS.mmm or HH:MM:SS.mmm to a timedelta."""
    try:
        return _seconds(_parse_float(text))
    except ValueError:
        pass

    parts = text.split(":")
    if len(parts) == 2:
        minutes = _component(parts[0], "minutes")
        seconds = _component(parts[1], "seconds")
        return _seconds(minutes * 60 + seconds)
    if len(parts) == 3:
        hours = _component(parts[0], "hours")
        minutes = _component(parts[1], "minutes")
        seconds = _component(parts[2], "seconds")
        return _seconds(hours * 3600 + minutes * 60 + seconds)

    raise ValueError(f"Unsupported time format: {text}")


def _read_records(path: str | PathLike[str]) -> list[list[str]]:
    records: list[list[str]] = []
    width: int | None = None
    with open(path, encoding="utf-8", errors="replace", newline="") as handle:
        reader = csv.reader(handle, delimiter="\t", skipinitialspace=True)
        try:
            for row in reader:
                if not row:
                    continue
                if width is None:
                    width = len(row)
                elif len(row) != width:
                    raise CSVFormatError(
                        f"Failed to read CSV data: record on line {reader.line_num}: "
                        "wrong number of fields"
                    )
                records.append(row)
        except csv.Error as exc:
            raise CSVFormatError(f"Failed to read CSV data: {exc}") from exc
    return records


def _is_header_cell(cell: str) -> bool:
    lowered = cell.strip().lower()
    return "name" in lowered or "start" in lowered


def _find_header_columns(records: list[list[str]]) -> tuple[int, int]:
    name_idx = start_idx = -1
    for row in records:
        for column, cell in enumerate(row):
            lowered = cell.strip().lower()
            if "name" in lowered:
                name_idx = column
            elif "start" in lowered:
                start_idx = column
        if name_idx >= 0 and start_idx >= 0:
            return name_idx, start_idx
    raise CSVFormatError("CSV format error: 'Name' and 'Start' columns not found")


def _data_start(records: list[list[str]]) -> int:
    for index, row in enumerate(records):
        if any(_is_header_cell(cell) for cell in row):
            return index + 1
    return 0


def _parse_markers(records: list[list[str]], name_idx: int, start_idx: int) -> list[MarkerEntry]:
    needed = max(name_idx, start_idx)
    markers: list[MarkerEntry] = []
    for row in records[_data_start(records):]:
        if len(row) <= needed:
            continue
        name = row[name_idx].strip()
        if not name:
            continue
        start_text = row[start_idx].strip()
        try:
            start_time = parse_time_string(start_text)
        except ValueError as exc:
            raise CSVFormatError(f"Failed to parse start time '{start_text}': {exc}") from exc
        markers.append(MarkerEntry(name, start_time))
    return markers


def parse_audition_csv(path: str | PathLike[str]) -> list[MarkerEntry]:
    """Read the markers from a tab-separated Audition marker export."""
    records = _read_records(path)
    if len(records) <= 1:
        return []
    name_idx, start_idx = _find_header_columns(records)
    return _parse_markers(records, name_idx, start_idx)