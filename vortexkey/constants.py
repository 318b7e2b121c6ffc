"""Configuration and fixed constants shared across the package."""

from types import MappingProxyType

# === Configuration constants ===

FRAME_DIR = "vortexkey_framebuffer"
"""Folder inside the system temp directory holding intermediate frames."""

FFMPEG_EXECUTABLE_PATH = "/bin/ffmpeg"
"""Path to the ffmpeg executable."""

H264_CRF = 20
"""H.264 constant rate factor (0 lossless .. 51 worst)."""

H264_PRESET = "veryfast"
"""H.264 encoder preset, trading speed against compression."""

PREBUFFER_FRAMES = 3
"""Blank frames added before the data stream."""

POSTBUFFER_FRAMES = 3
"""Blank frames added after the data stream."""

DOWNSAMPLE_SCALER = 2
"""Extracted frames are scaled to this multiple of the data resolution, then averaged."""

COLORSPACE = "bt709"
"""Colorspace the video is encoded as."""

COLOR_RANGE = "tv"
"""Video encoding color range."""

# === Fixed constants ===

RESOLUTIONS = MappingProxyType(
    {
        "240p": (426, 240),
        "360p": (640, 360),
        "480p": (854, 480),
        "720p": (1280, 720),
        "1080p": (1920, 1080),
        "1440p": (2560, 1440),
        "4k": (3840, 2160),
        "8k": (7680, 4320),
    }
)
"""Common display resolutions as (width, height)."""

COLOR_CHANNELS = 3

HAMMING_DATA_POSITIONS_31_26 = (
    2, 4, 5, 6, 8, 9, 10, 11, 12, 13, 14, 16, 17, 18, 19, 20, 21, 22, 23, 24,
    25, 26, 27, 28, 29, 30,
)
"""Bit offsets of the data bits in a Hamming(31,26) code word."""

HAMMING_PARITY_POSITIONS_31_26 = (1, 2, 4, 8, 16)
"""One-based positions of the parity bits in a Hamming(31,26) code word."""

HAMMING_DATA_BITS_31_26 = 26

BIT_MASK_26 = (1 << 26) - 1
BIT_MASK_31 = (1 << 31) - 1

HAMMING_CHUNK_BYTES_31_26 = 13
"""Bytes per data chunk for Hamming encoding: lcm(8, 26) / 8."""

HAMMING_CHUNK_BYTES_TOTAL_31_26 = 16
"""Bytes per chunk once parity has been added."""

BYTES_U32 = 4


def resolution(name):
    """Return the (width, height) of a named resolution such as "1080p"."""
    try:
        return RESOLUTIONS[name]
    except KeyError:
        raise ValueError("Invalid resolution specified.") from None