[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "vortexkey"
version = "1.0.1"
description = "Encode arbitrary data into compression resistant video and decode it back."
requires-python = ">=3.10"
dependencies = [
    "pillow",
]
keywords = ["video", "encoding", "hamming", "error-correction", "ffmpeg"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Video :: Conversion",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
vortexkey = "vortexkey.cli:main"

[tool.setuptools.packages.find]
include = ["vortexkey*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
