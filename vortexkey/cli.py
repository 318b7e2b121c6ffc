"""Command line interface: argument parsing and running the requested conversion."""

import argparse
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from vortexkey.constants import RESOLUTIONS, resolution
from vortexkey.converter import Converter
from vortexkey.utils import format_duration

_VERSION = "1.0.1"


class OperatingMode(Enum):
    """Converter operating mode."""

    DATA_TO_VIDEO = "dtv"
    VIDEO_TO_DATA = "vtd"
    SPLIT = "split"


@dataclass(frozen=True)
class Args:
    """Parsed command line arguments."""

    outputfile: Path
    inputfile: Path
    overwrite: bool = False
    mode: OperatingMode = OperatingMode.DATA_TO_VIDEO
    colorbits: int = 121
    video_fps: int = 30
    data_fps: int = 1
    frame_resolution: str = "1080p"
    data_pixel_size: int = 10

    @property
    def color_bits(self):
        """Bits per channel as (red, green, blue), one decimal digit each."""
        return (self.colorbits // 100, (self.colorbits % 100) // 10, self.colorbits % 10)

    def to_converter(self):
        """Build a Converter from these arguments."""
        width, height = resolution(self.frame_resolution)
        data_dimensions = (width // self.data_pixel_size, height // self.data_pixel_size)
        return Converter(
            self.color_bits,
            self.data_fps,
            self.video_fps,
            (width, height),
            data_dimensions,
        )


def _ranged_int(low, high):
    def parse(text):
        try:
            value = int(text)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid integer value: {text!r}") from None
        if not low <= value <= high:
            raise argparse.ArgumentTypeError(f"{value} is not in {low}..={high}")
        return value

    return parse


def _build_parser():
    parser = argparse.ArgumentParser(
        prog="vortexkey",
        description="Data compression resistant video generator.",
    )
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {_VERSION}")
    parser.add_argument(
        "outputfile", type=Path, help="Output file (video file or reconstructed data)."
    )
    parser.add_argument(
        "-i", dest="inputfile", type=Path, required=True,
        help="Input file (video file or data to convert).",
    )
    parser.add_argument(
        "-y", dest="overwrite", action="store_true",
        help="If output file should be overwritten if it exists.",
    )
    parser.add_argument(
        "-m", dest="mode", type=OperatingMode,
        choices=list(OperatingMode), default=OperatingMode.DATA_TO_VIDEO,
        metavar="{" + ",".join(mode.value for mode in OperatingMode) + "}",
        help="Operating mode dtv (Data to Video), vtd (Video to Data) or split (Data to Frames)",
    )
    parser.add_argument(
        "-c", dest="colorbits", type=_ranged_int(111, 888), default=121,
        help="Number of bits encoded in each color channel. (RGB)",
    )
    parser.add_argument(
        "--video-fps", dest="video_fps", type=_ranged_int(1, 60), default=30,
        help="Output video framerate.",
    )
    parser.add_argument(
        "--data-fps", dest="data_fps", type=_ranged_int(1, 60), default=1,
        help="Data framerate.",
    )
    parser.add_argument(
        "-f", "--frame-resolution", dest="frame_resolution",
        choices=list(RESOLUTIONS), default="1080p",
        help="Output video resolution.",
    )
    parser.add_argument(
        "-d", "--data-pixel-size", dest="data_pixel_size",
        type=_ranged_int(1, 100), default=10,
        help="Size of data block in pixels.",
    )
    return parser


def parse_args(argv=None):
    """Parse command line arguments into an Args instance."""
    namespace = _build_parser().parse_args(argv)
    return Args(**vars(namespace))


@contextmanager
def _timed(name):
    print(f"Starting {name}.")
    start = time.perf_counter()
    yield
    print(f"Finished {name} after: {format_duration(time.perf_counter() - start)}")


def execute_args(argv=None):
    """Run the conversion requested on the command line.

    Returns the FileReport in video to data mode, otherwise None.
    """
    args = parse_args(argv)
    converter = args.to_converter()

    if not args.inputfile.exists():
        raise FileNotFoundError(
            f"Provided input file at {str(args.inputfile)!r} could not be found."
        )

    if args.mode is OperatingMode.SPLIT:
        with _timed("frame generation"):
            converter.deconstruct_file(args.inputfile)
        return None

    if args.mode is OperatingMode.DATA_TO_VIDEO:
        with _timed("frame generation"):
            converter.deconstruct_file(args.inputfile)
        with _timed("frame combination"):
            converter.combine_frames(args.outputfile, args.overwrite)
        return None

    with _timed("video splitting"):
        converter.split_video(args.inputfile)
    with _timed("file reconstruction"):
        report = converter.reconstruct_file(args.outputfile, args.overwrite)
        print(
            "Errors during file reconstruction: "
            f"Corrected: {report.corrected_errors}  "
            f"Uncorrectable: {report.uncorrected_errors}"
        )
    return report


def main(argv=None):
    """Entry point of the command; returns the process exit status."""
    start = time.perf_counter()
    try:
        execute_args(argv)
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(f"Total execution time: {format_duration(time.perf_counter() - start)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())