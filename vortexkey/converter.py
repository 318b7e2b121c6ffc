"""Turning files into frame images and videos, and back again."""

import hashlib
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from vortexkey.codec import (
    HEADER_LEN,
    VERSION_CODE,
    ConversionError,
    FrameCodec,
    data_block_header,
    read_data_header,
)
from vortexkey.constants import (
    COLOR_RANGE,
    COLORSPACE,
    DOWNSAMPLE_SCALER,
    FFMPEG_EXECUTABLE_PATH,
    H264_CRF,
    H264_PRESET,
    HAMMING_CHUNK_BYTES_31_26,
    HAMMING_CHUNK_BYTES_TOTAL_31_26,
    POSTBUFFER_FRAMES,
    PREBUFFER_FRAMES,
)
from vortexkey.error_correction import (
    decode_with_hamming_31_26,
    encode_with_hamming_31_26,
)
from vortexkey.filesys import (
    clear_framebuffer_folder,
    frame_path_combine,
    frame_path_wildcard_combine,
    frame_path_wildcard_split,
    get_framebuffer_folder,
)
from vortexkey.utils import bytes_to_hex_string

_HEADER_TOTAL = HEADER_LEN * 3


def _pad_to_multiple(data, size):
    """Zero-pad ``data`` up to the next multiple of ``size`` bytes."""
    return bytes(data) + bytes(-len(data) % size)


@dataclass(frozen=True)
class FileReport:
    """Outcome of error correction and hash checking for a reconstructed file."""

    corrected_errors: int
    uncorrected_errors: int
    hash_match: bool

    @classmethod
    def from_hamming_report(cls, base_report, hash_match):
        """Extend a HammingReport with whether the file hash matched."""
        return cls(
            corrected_errors=base_report.corrected_errors,
            uncorrected_errors=base_report.uncorrected_errors,
            hash_match=hash_match,
        )


class Converter(FrameCodec):
    """Converts files to frame images and videos and back."""

    def save_buffer_frame(self, path):
        """Save a frame whose encoded bytes are all zero."""
        self.save_data_frame(bytes(self.frame_data_byte_count), path)

    def save_data_frame(self, frame_data, path):
        """Encode up to one frame of bytes, zero-padded, and save it as a PNG."""
        frame_data = bytes(frame_data)
        if len(frame_data) > self.frame_data_byte_count:
            raise ConversionError(
                f"Frame data supplied ({len(frame_data)} bytes) is longer than "
                f"expected ({self.frame_data_byte_count} bytes)."
            )
        padded = frame_data.ljust(self.frame_data_byte_count, b"\0")
        pixels = self.data_to_frame(padded)
        image = Image.frombytes("RGB", (self.data_width, self.data_height), pixels)
        image.save(Path(path), format="PNG")

    def deconstruct_file(self, path):
        """Encode the file at ``path`` into numbered frames in the frame buffer folder.

        Blank frames are placed before and after the data; the first data
        frame starts with the triplicated header.
        """
        file_data = Path(path).read_bytes()
        header = data_block_header(file_data)

        clear_framebuffer_folder()

        for index in range(PREBUFFER_FRAMES):
            self.save_buffer_frame(frame_path_combine(index))

        file_data = _pad_to_multiple(file_data, HAMMING_CHUNK_BYTES_31_26)
        print(f"Encoding {len(file_data)} bytes to video.")

        stream = header + encode_with_hamming_31_26(file_data)
        step = self.frame_data_byte_count
        chunks = [stream[start:start + step] for start in range(0, len(stream), step)]
        for offset, chunk in enumerate(chunks):
            self.save_data_frame(chunk, frame_path_combine(PREBUFFER_FRAMES + offset))

        post_start = PREBUFFER_FRAMES + len(chunks)
        for index in range(post_start, post_start + POSTBUFFER_FRAMES):
            self.save_buffer_frame(frame_path_combine(index))

    def average_blocks(self, path):
        """Read a frame at DOWNSAMPLE_SCALER times the data resolution and average each block.

        Returns the RGB bytes of one averaged pixel per data unit.
        """
        with Image.open(path) as opened:
            image = opened.convert("RGB")
        width, height = image.size
        expected_width = self.data_width * DOWNSAMPLE_SCALER
        expected_height = self.data_height * DOWNSAMPLE_SCALER
        if width != expected_width:
            raise ConversionError(
                f"Read image width ({width}) is incorrect. Expected data_width * "
                f"DOWNSAMPLE_SCALER ({self.data_width}*{DOWNSAMPLE_SCALER}={expected_width})"
            )
        if height != expected_height:
            raise ConversionError(
                f"Read image height ({height}) is incorrect. Expected data_height * "
                f"DOWNSAMPLE_SCALER ({self.data_height}*{DOWNSAMPLE_SCALER}={expected_height})"
            )

        pixels = image.load()
        block_size = DOWNSAMPLE_SCALER * DOWNSAMPLE_SCALER
        output = bytearray()
        for by in range(self.data_height):
            for bx in range(self.data_width):
                block = [
                    pixels[bx * DOWNSAMPLE_SCALER + x, by * DOWNSAMPLE_SCALER + y]
                    for y in range(DOWNSAMPLE_SCALER)
                    for x in range(DOWNSAMPLE_SCALER)
                ]
                output.extend(sum(channel) // block_size for channel in zip(*block))
        return bytes(output)

    def reconstruct_file(self, path, overwrite):
        """Decode the split frames in the frame buffer folder and write the file to ``path``.

        Returns a FileReport on the errors found and whether the hash matched.
        """
        path = Path(path)
        if self.frame_data_byte_count < _HEADER_TOTAL:
            raise ConversionError(
                f"Frames hold {self.frame_data_byte_count} bytes, too few for the "
                f"{_HEADER_TOTAL} byte header."
            )

        read_from_video = bytearray()
        checked_header = None
        pattern = frame_path_wildcard_split()
        for frame_path in sorted(pattern.parent.glob(pattern.name)):
            content = self.frame_to_data(self.average_blocks(frame_path))
            if checked_header is not None:
                read_from_video += content
                continue
            header = content[:_HEADER_TOTAL]
            # An all-zero header means we are still on a prebuffer frame.
            if any(header):
                try:
                    checked_header = read_data_header(header)
                except ValueError as exc:
                    raise ConversionError("Unable to decode header.") from exc
                read_from_video += content[_HEADER_TOTAL:]

        print(f"Read {len(read_from_video)} bytes from video.")

        padded = _pad_to_multiple(read_from_video, HAMMING_CHUNK_BYTES_TOTAL_31_26)
        corrected_data, hamming_report = decode_with_hamming_31_26(padded)

        if checked_header is None or checked_header.version_code != VERSION_CODE:
            raise ConversionError(
                "Unable to find correct VERSION_CODE. First data frame missing or corrupted."
            )
        if checked_header.data_len == 0:
            raise ConversionError("Expected size read as invalid value zero.")
        if checked_header.data_len > len(corrected_data):
            raise ConversionError(
                f"Read less data ({len(corrected_data)} bytes) than expected file size "
                f"({checked_header.data_len} bytes)."
            )

        corrected_data = corrected_data[:checked_header.data_len]
        print(f"Writing {len(corrected_data)} bytes to file.")

        if not overwrite and path.exists():
            raise FileExistsError(
                "File at file output path exists and overwrite is not enabled."
            )

        computed_hash = hashlib.sha256(corrected_data).digest()
        path.write_bytes(corrected_data)

        report = FileReport.from_hamming_report(
            hamming_report, computed_hash == checked_header.sha256_hash
        )
        if not report.hash_match:
            print(
                f"Reconstructed file hash {bytes_to_hex_string(computed_hash)} does not "
                f"match expected hash {bytes_to_hex_string(checked_header.sha256_hash)}.",
                file=sys.stderr,
            )
        return report

    def combine_frames(self, output_file, overwrite):
        """Stitch the frames in the frame buffer folder into an H.264 video with ffmpeg."""
        output_file = Path(output_file)
        if not overwrite and output_file.exists():
            raise FileExistsError(
                "File at video output path exists and overwrite is not enabled."
            )
        command = [
            FFMPEG_EXECUTABLE_PATH,
            "-hide_banner",
            "-loglevel",
            "error",
            "-framerate",
            str(self.data_fps),
            "-pattern_type",
            "glob",
            "-i",
            str(frame_path_wildcard_combine()),
            "-vf",
            f"scale={self.frame_width}:{self.frame_height}:flags=neighbor,format=yuv420p",
            "-c:v",
            "libx264",
            "-preset",
            H264_PRESET,
            "-crf",
            str(H264_CRF),
            "-profile:v",
            "high",
            "-colorspace:v",
            COLORSPACE,
            "-color_primaries:v",
            COLORSPACE,
            "-color_trc:v",
            COLORSPACE,
            "-color_range:v",
            COLOR_RANGE,
            "-r",
            str(self.video_fps),
            "-y",
            str(output_file),
        ]
        result = subprocess.run(command, stdout=subprocess.DEVNULL, check=False)
        if result.returncode != 0:
            raise ConversionError("ffmpeg returned nonzero exit status.")

    def split_video(self, input_file):
        """Split a video into frames at DOWNSAMPLE_SCALER times the data resolution."""
        clear_framebuffer_folder()
        frame_pattern = get_framebuffer_folder() / "split%09d.png"
        command = [
            FFMPEG_EXECUTABLE_PATH,
            "-hide_banner",
            "-loglevel",
            "error",
            "-i",
            str(Path(input_file)),
            "-vf",
            f"scale={self.data_width * DOWNSAMPLE_SCALER}:"
            f"{self.data_height * DOWNSAMPLE_SCALER}:flags=neighbor",
            "-r",
            str(self.data_fps),
            str(frame_pattern),
        ]
        result = subprocess.run(command, stdout=subprocess.DEVNULL, check=False)
        if result.returncode != 0:
            raise ConversionError("ffmpeg returned nonzero exit status.")