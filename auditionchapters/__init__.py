"""Add ID3v2 chapter tags (CHAP/CTOC) to MP3 files from Adobe Audition marker lists."""

__version__ = "0.1.0"