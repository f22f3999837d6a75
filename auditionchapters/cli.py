"""Command line: add Audition markers as ID3 chapters to an MP3 file."""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from typing import NoReturn

from .chapters import OperationCancelled, _extension, add_chapters, generate_output_path
from .csvparser import CSVFormatError, MarkerEntry, parse_audition_csv
from .reader import format_duration, read_chapters, read_toc
from .tag import ID3Error

_RULE = "-" * 60

_OPTIONS = (
    ("csv", "Path to CSV file containing Adobe Audition markers (required)"),
    ("input", "Path to original MP3 file to add chapters to (required)"),
    (
        "output",
        "Path for output MP3 file with chapters "
        "(if not specified, will output as filename_with_chapters.mp3)",
    ),
)


@dataclass(frozen=True)
class Config:
    """The settings taken from the command line."""

    csv_path: str
    input_mp3: str
    output_mp3: str = ""


def _program_name() -> str:
    return sys.argv[0] if sys.argv and sys.argv[0] else "auditionchapters"


def _usage_text(prog: str) -> str:
    lines = [
        f"Usage: {prog} -csv <CSV file path> -input <input MP3 path> [-output <output MP3 path>]",
        "",
        "Options:",
    ]
    for name, text in _OPTIONS:
        lines += [f"  -{name} string", f"    \t{text}"]
    lines += [
        "",
        "Examples:",
        "  Add chapters and save as podcast_with_chapters.mp3:",
        f'  {prog} -csv "marker.csv" -input "podcast.mp3"',
        "",
        "  Save with custom output filename:",
        f'  {prog} -csv "marker.csv" -input "podcast.mp3" -output "custom_filename.mp3"',
    ]
    return "\n".join(lines) + "\n"


class _FlagParser(argparse.ArgumentParser):
    def format_help(self) -> str:
        return _usage_text(self.prog)

    def format_usage(self) -> str:
        return _usage_text(self.prog)

    def print_help(self, file=None) -> None:
        (file or sys.stderr).write(self.format_help())

    def error(self, message: str) -> NoReturn:
        sys.stderr.write(f"{message}\n")
        self.print_help()
        self.exit(2)


def _build_parser(prog: str) -> _FlagParser:
    parser = _FlagParser(prog=prog, allow_abbrev=False)
    for name, text in _OPTIONS:
        parser.add_argument(f"-{name}", f"--{name}", dest=name, default="", help=text)
    return parser


def _file_exists(path: str) -> bool:
    return os.path.exists(path) and not os.path.isdir(path)


def parse_args(argv: list[str] | None = None) -> Config:
    """Parse and check the command line; raise ValueError on bad settings."""
    namespace = _build_parser(_program_name()).parse_args(argv)
    config = Config(namespace.csv, namespace.input, namespace.output)

    if not config.csv_path or not config.input_mp3:
        raise ValueError("CSV file path and input MP3 path are required")
    if not _file_exists(config.csv_path):
        raise ValueError(f"CSV file '{config.csv_path}' not found")
    if not _file_exists(config.input_mp3):
        raise ValueError(f"Input MP3 file '{config.input_mp3}' not found")
    if _extension(config.input_mp3).lower() != ".mp3":
        raise ValueError(f"Input file '{config.input_mp3}' is not an MP3 file")
    if config.output_mp3 and _extension(config.output_mp3).lower() != ".mp3":
        raise ValueError(f"Output file '{config.output_mp3}' does not have MP3 extension")
    return config


def determine_output_path(input_path: str, output_path: str) -> str:
    """The given output path, or the input path with the chapters suffix."""
    return output_path or generate_output_path(input_path)


def _show_marker_info(markers: list[MarkerEntry]) -> None:
    if markers:
        print(f"Loaded {len(markers)} markers")
    else:
        print("Warning: No markers found in CSV file")


def _verify_and_show_chapters(path: str) -> None:
    print("\nVerifying chapters in output file:")
    try:
        chapters = read_chapters(path)
    except (ID3Error, OSError) as exc:
        print(f"Warning: Could not read chapters from output file: {exc}", file=sys.stderr)
        return

    if not chapters:
        print("No chapters found in output file.")
        return

    try:
        toc = read_toc(path)
    except (ID3Error, OSError):
        toc = None
    if toc is not None:
        print("Table of Contents information:")
        print(f"Title: {toc.title}")
        print(f"Top level: {str(toc.is_top_level).lower()}")
        print(f"Ordered: {str(toc.is_ordered).lower()}")
        print(f"Child elements: {len(toc.child_ids)}")
        print(_RULE)

    print(f"Found {len(chapters)} chapters in output file:")
    print(_RULE)
    print(f"{'No.':<4} | {'Start Time':<12} | Title")
    print(_RULE)
    for number, chapter in enumerate(chapters, start=1):
        print(f"{number:<4} | {format_duration(chapter.start_time):<12} | {chapter.title}")
    print(_RULE)


def main(argv: list[str] | None = None) -> int:
    """Run the command and return its exit status."""
    try:
        config = parse_args(argv)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.stderr.write(_usage_text(_program_name()))
        return 1

    print(f"Parsing CSV file '{config.csv_path}'...")
    try:
        markers = parse_audition_csv(config.csv_path)
    except (CSVFormatError, OSError) as exc:
        print(f"Error occurred while parsing CSV: {exc}", file=sys.stderr)
        return 1

    _show_marker_info(markers)

    print("Adding chapter tags to MP3 file...")
    try:
        add_chapters(config.input_mp3, markers, config.output_mp3 or None)
    except (OperationCancelled, ID3Error, OSError, ValueError) as exc:
        print(f"Error occurred while adding chapter tags: {exc}", file=sys.stderr)
        return 1

    target = determine_output_path(config.input_mp3, config.output_mp3)
    print(f"Done! MP3 file with chapter tags has been saved to '{target}'")
    _verify_and_show_chapters(target)
    return 0


if __name__ == "__main__":
    sys.exit(main())