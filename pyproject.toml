[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "auditionchapters"
version = "0.1.0"
description = "Turn Adobe Audition marker lists into ID3v2 chapter tags (CHAP/CTOC) in MP3 files"
requires-python = ">=3.10"
dependencies = []
keywords = ["mp3", "id3", "id3v2", "chapters", "podcast", "audition", "markers"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
audition-marker = "auditionchapters.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["auditionchapters"]

[tool.pytest.ini_options]
addopts = "-ra"
