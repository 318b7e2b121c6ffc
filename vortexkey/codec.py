"""Packing bytes into frames of colour data units, and the stream header."""

import hashlib
from dataclasses import dataclass

from vortexkey.constants import COLOR_CHANNELS, DOWNSAMPLE_SCALER

VERSION_CODE = bytes([68, 65, 67, 79, 0, 255, 0, 1])
"""Converter version, also the magic marking the first data frame."""

HEADER_LEN = 48
"""Length of one copy of the header in bytes."""

MIN_FPS = 1
"""Lowest data frame rate allowed."""

_BYTE_BITS = 8
_LEN_FIELD = slice(8, 16)
_HASH_FIELD = slice(16, 48)


class ConversionError(ValueError):
    """Raised when data cannot be converted with the given settings."""


@dataclass(frozen=True)
class HeaderData:
    """Contents of the header read from the first data frame."""

    version_code: bytes
    data_len: int
    sha256_hash: bytes


def data_block_header(data):
    """Build the header for ``data``, three identical copies back to back.

    Each copy holds the version code, the data length as a little-endian
    64-bit integer and the SHA-256 hash of the data.
    """
    data = bytes(data)
    header = (
        VERSION_CODE
        + len(data).to_bytes(8, "little")
        + hashlib.sha256(data).digest()
    )
    return header * 3


def read_data_header(header):
    """Decode a triplicated header, taking the bitwise majority of the copies."""
    header = bytes(header)
    if len(header) != HEADER_LEN * 3:
        raise ConversionError(
            f"Header must be {HEADER_LEN * 3} bytes long, got {len(header)}."
        )
    copies = (
        header[:HEADER_LEN],
        header[HEADER_LEN:2 * HEADER_LEN],
        header[2 * HEADER_LEN:],
    )
    majority = bytes(
        (a & b) | (b & c) | (a & c) for a, b, c in zip(*copies)
    )
    return HeaderData(
        version_code=majority[:len(VERSION_CODE)],
        data_len=int.from_bytes(majority[_LEN_FIELD], "little"),
        sha256_hash=majority[_HASH_FIELD],
    )


def _encode_channel(value, bits):
    """Place ``bits`` of ``value`` at the top of a byte, centred in the leftover range."""
    byte = (value << (_BYTE_BITS - bits)) & 0xFF
    if bits < _BYTE_BITS:
        byte |= 1 << (_BYTE_BITS - bits - 1)
    return byte


class FrameCodec:
    """Maps between raw bytes and frames of RGB data units.

    Every data unit (pixel) carries ``total_bits`` bits of the stream, split
    over the red, green and blue channels as given by ``color_bits``.
    """

    def __init__(self, color_bits, data_fps, video_fps, frame_dimensions, data_dimensions):
        red_bits, green_bits, blue_bits = color_bits
        frame_width, frame_height = frame_dimensions
        data_width, data_height = data_dimensions

        if any(bits > _BYTE_BITS for bits in color_bits):
            raise ConversionError("Color channel bit counts must be one byte or smaller.")
        if any(bits < 0 for bits in color_bits):
            raise ConversionError("Color channel bit counts must not be negative.")
        total_bits = red_bits + green_bits + blue_bits
        if total_bits == 0:
            raise ConversionError("At least one color channel must carry data bits.")

        if not MIN_FPS <= data_fps <= video_fps:
            raise ConversionError(
                f"Data fps ({data_fps}) must be between {MIN_FPS} and video fps ({video_fps})."
            )
        if video_fps % data_fps:
            raise ConversionError(
                f"Video fps ({video_fps}) is not whole multiple of data fps ({data_fps})."
            )

        if data_width <= 0 or data_height <= 0:
            raise ConversionError("Data dimensions must be positive.")
        if frame_width % data_width:
            raise ConversionError(
                f"Frame width ({frame_width}) is not whole multiple of data width ({data_width})."
            )
        if frame_height % data_height:
            raise ConversionError(
                f"Frame height ({frame_height}) is not whole multiple of data height ({data_height})."
            )
        if frame_width < DOWNSAMPLE_SCALER * data_width:
            raise ConversionError(
                f"Frame width ({frame_width}) can not be smaller than data width ({data_width}) "
                f"multiplied by downsample scaler ({DOWNSAMPLE_SCALER})."
            )
        if frame_height < DOWNSAMPLE_SCALER * data_height:
            raise ConversionError(
                f"Frame height ({frame_height}) can not be smaller than data height ({data_height}) "
                f"multiplied by downsample scaler ({DOWNSAMPLE_SCALER})."
            )

        frame_data_unit_count = data_width * data_height
        frame_data_bit_count = total_bits * frame_data_unit_count
        if frame_data_bit_count % _BYTE_BITS:
            raise ConversionError(
                "Frame must encode whole number of bytes. "
                f"Trying to encode {frame_data_bit_count} bits."
            )

        self.red_bits = red_bits
        self.green_bits = green_bits
        self.blue_bits = blue_bits
        self.total_bits = total_bits
        self.data_fps = data_fps
        self.video_fps = video_fps
        self.frame_width = frame_width
        self.frame_height = frame_height
        self.data_width = data_width
        self.data_height = data_height
        self.frame_data_unit_count = frame_data_unit_count
        self.frame_data_byte_count = frame_data_bit_count // _BYTE_BITS

    @property
    def color_bits(self):
        """Bits carried per channel as (red, green, blue)."""
        return (self.red_bits, self.green_bits, self.blue_bits)

    def __repr__(self):
        return (
            f"{type(self).__name__}(color_bits={self.color_bits}, "
            f"data_fps={self.data_fps}, video_fps={self.video_fps}, "
            f"frame_dimensions={(self.frame_width, self.frame_height)}, "
            f"data_dimensions={(self.data_width, self.data_height)})"
        )

    def data_to_frame(self, data):
        """Encode exactly ``frame_data_byte_count`` bytes as RGB triplets."""
        data = bytes(data)
        if len(data) != self.frame_data_byte_count:
            raise ConversionError(
                f"Frame data must be {self.frame_data_byte_count} bytes, got {len(data)}."
            )
        bit_count = len(data) * _BYTE_BITS
        bit_string = format(int.from_bytes(data, "big"), f"0{bit_count}b")
        green_blue = self.green_bits + self.blue_bits
        red_mask = (1 << self.red_bits) - 1
        green_mask = (1 << self.green_bits) - 1
        blue_mask = (1 << self.blue_bits) - 1

        pixels = bytearray()
        for start in range(0, bit_count, self.total_bits):
            unit = int(bit_string[start:start + self.total_bits], 2)
            pixels.append(_encode_channel((unit >> green_blue) & red_mask, self.red_bits))
            pixels.append(
                _encode_channel((unit >> self.blue_bits) & green_mask, self.green_bits)
            )
            pixels.append(_encode_channel(unit & blue_mask, self.blue_bits))
        return bytes(pixels)

    def frame_to_data(self, frame_data_units):
        """Decode RGB triplets, one per data unit, back into the bytes they carry."""
        frame_data_units = bytes(frame_data_units)
        expected = self.frame_data_unit_count * COLOR_CHANNELS
        if len(frame_data_units) != expected:
            raise ConversionError(
                f"Frame must hold {expected} color bytes, got {len(frame_data_units)}."
            )
        red_shift = _BYTE_BITS - self.red_bits
        green_shift = _BYTE_BITS - self.green_bits
        blue_shift = _BYTE_BITS - self.blue_bits
        unit_format = f"0{self.total_bits}b"

        triplets = zip(*[iter(frame_data_units)] * COLOR_CHANNELS)
        bit_string = "".join(
            format(
                (red >> red_shift) << (self.green_bits + self.blue_bits)
                | (green >> green_shift) << self.blue_bits
                | (blue >> blue_shift),
                unit_format,
            )
            for red, green, blue in triplets
        )
        return int(bit_string, 2).to_bytes(self.frame_data_byte_count, "big")