"""Locations of the frame buffer directory and the frames inside it."""

import shutil
import tempfile
from pathlib import Path

from vortexkey.constants import FRAME_DIR


def get_framebuffer_folder():
    """Return the frame buffer directory in the temp directory, creating it if needed."""
    frame_dir = Path(tempfile.gettempdir()) / FRAME_DIR
    if not frame_dir.exists():
        frame_dir.mkdir()
    return frame_dir


def clear_framebuffer_folder():
    """Empty the frame buffer directory by deleting and recreating it."""
    frame_dir = get_framebuffer_folder()
    shutil.rmtree(frame_dir)
    frame_dir.mkdir()


def frame_path_combine(index):
    """Path of the numbered frame that will be combined into a video."""
    return get_framebuffer_folder() / f"combine{index:012d}.png"


def frame_path_wildcard_split():
    """Glob pattern matching all frames split out of a video."""
    return get_framebuffer_folder() / "split*.png"


def frame_path_wildcard_combine():
    """Glob pattern matching all frames to be combined into a video."""
    return get_framebuffer_folder() / "combine*.png"