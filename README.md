# auditionchapters

Add podcast-style chapter markers to MP3 files from a marker list exported
by Adobe Audition.

The marker list is the tab-separated file that Audition writes when you
export markers. Every marker that has a name becomes an ID3v2 `CHAP` frame
(element IDs `chp0`, `chp1`, ... by row position, start time only, UTF-8
title), and one `CTOC` frame with element ID `toc` and the title
"Table of Contents" is added. It is marked top-level and ordered and lists
all the chapters. The audio data after the tag is copied unchanged.

## Installation

```
pip install .
```

No third-party libraries are needed. To run the tests, install the `test`
extra (`pip install .[test]`) and run `pytest`.

## Command line

```
audition-marker -csv marker.csv -input podcast.mp3
```

This writes `podcast_with_chapters.mp3` next to the input file. To choose the
output name:

```
audition-marker -csv marker.csv -input podcast.mp3 -output custom_filename.mp3
```

Options (each may also be written with two dashes, e.g. `--csv`):

- `-csv`: the Audition marker file (required)
- `-input`: the MP3 to add chapters to (required, must end in `.mp3`)
- `-output`: where to write the result. It must end in `.mp3`. If it is the
  same path as the input, the input file is changed in place.

Before overwriting an existing output file, or before changing the input in
place, the command asks for confirmation. Only `y` or `yes` goes on. The
output is first written to `<output>.tmp` and then moved into place. Any
existing `CHAP` and `CTOC` frames are replaced. Other frames are kept.

When it is done, the command reads the written file back and prints the
table of contents and the chapter list, sorted by start time, with times
shown as `M:SS.mmm` or `H:MM:SS.mmm`. On any error it prints a message to
standard error and exits with status 1.

### Marker file

The file is read as UTF-8, tab-separated text. Every non-empty row must have
the same number of fields. The header row is the first row that has a cell
containing `name` and a cell containing `start` (case-insensitive). Start
times may be written as plain seconds (`12.5`), `MM:SS.mmm` or
`HH:MM:SS.mmm`. Rows without a name are skipped. A start time that cannot be
read stops the run with an error.

## Library use

```python
from auditionchapters.csvparser import parse_audition_csv
from auditionchapters.chapters import add_chapters
from auditionchapters.reader import read_chapters, read_toc, format_duration

markers = parse_audition_csv("marker.csv")
written = add_chapters("podcast.mp3", markers, "podcast_chapters.mp3")

for chapter in read_chapters(written):
    print(format_duration(chapter.start_time), chapter.title)

toc = read_toc(written)
print(toc.title, toc.child_ids)
```

- `csvparser`: `parse_audition_csv`, `parse_time_string`, `MarkerEntry`,
  `CSVFormatError`.
- `chapters`: `add_chapters(mp3_path, markers, output_path=None, confirm=...)`
  returns the path written. `confirm` is called with a prompt before an
  existing file is changed and may raise `OperationCancelled` to refuse. The
  default `confirm_operation` asks on the terminal. Also `add_chapter_frames`,
  `create_chapter_frame` and `generate_output_path`.
- `reader`: `read_chapters`, `read_toc`, `extract_ctoc_info`,
  `format_duration`, `Chapter`, `CTOCInfo`.
- `tag`: `open_tag(path)` returns an `ID3Tag` with `get_frames`,
  `add_frame`, `delete_frames` and `save`. Read errors are raised as
  `ID3Error`.
- `frames`: the `TextFrame`, `ChapterFrame`, `CTOCFrame` and `UnknownFrame`
  types, `create_ctoc_frame`, `parse_text_frame` and `parse_chapter_frame`.

## Limits

- Only ID3v2.3 and ID3v2.4 tags can be read. A file with an ID3v2.2 tag is
  rejected. A file without a tag is treated as having an empty one.
- A saved tag is always written as ID3v2.4 without padding. Frame flags,
  tag-level unsynchronisation and compressed frames are not interpreted.
  Frames other than text, `CHAP` and `CTOC` are kept as raw bytes.
- There is no editing of existing chapters. The marker list always replaces
  the whole set of chapters.