import hashlib
import random

import pytest

from vortexkey.codec import (
    HEADER_LEN,
    VERSION_CODE,
    ConversionError,
    FrameCodec,
    HeaderData,
    data_block_header,
    read_data_header,
)

CONFIGS = [(1, 2, 1), (8, 8, 8), (3, 3, 2), (2, 2, 2), (1, 0, 1)]


def _codec(color_bits):
    return FrameCodec(color_bits, 1, 30, (8, 4), (4, 2))


def _random_bytes(count, seed=7):
    return random.Random(seed).randbytes(count)


def test_header_starts_with_version_code():
    header = data_block_header(b"hello")
    assert len(header) == HEADER_LEN * 3
    assert header[:8] == bytes([68, 65, 67, 79, 0, 255, 0, 1])


def test_header_copies_identical():
    header = data_block_header(b"some data")
    assert header[:HEADER_LEN] == header[HEADER_LEN:2 * HEADER_LEN]
    assert header[:HEADER_LEN] == header[2 * HEADER_LEN:]


def test_header_round_trip():
    data = b"hello world"
    result = read_data_header(data_block_header(data))
    assert result == HeaderData(
        version_code=VERSION_CODE,
        data_len=len(data),
        sha256_hash=hashlib.sha256(data).digest(),
    )


def test_header_majority_vote_survives_one_bad_copy():
    data = _random_bytes(100)
    header = bytearray(data_block_header(data))
    for i in range(HEADER_LEN, 2 * HEADER_LEN):
        header[i] ^= 0xFF
    result = read_data_header(header)
    assert result.version_code == VERSION_CODE
    assert result.data_len == 100
    assert result.sha256_hash == hashlib.sha256(data).digest()


def test_header_majority_vote_per_bit():
    header = bytearray(data_block_header(b"abc"))
    header[8] ^= 0x01
    header[HEADER_LEN + 8] ^= 0x02
    header[2 * HEADER_LEN + 8] ^= 0x04
    assert read_data_header(header).data_len == 3


def test_read_header_wrong_length():
    with pytest.raises(ConversionError):
        read_data_header(bytes(HEADER_LEN * 3 - 1))


@pytest.mark.parametrize("color_bits", CONFIGS)
def test_frame_round_trip(color_bits):
    codec = _codec(color_bits)
    data = _random_bytes(codec.frame_data_byte_count)
    frame = codec.data_to_frame(data)
    assert len(frame) == codec.frame_data_unit_count * 3
    assert codec.frame_to_data(frame) == data


@pytest.mark.parametrize("color_bits", CONFIGS)
def test_byte_count_matches_bits(color_bits):
    codec = _codec(color_bits)
    assert codec.frame_data_byte_count * 8 == codec.frame_data_unit_count * sum(color_bits)


def test_full_bytes_channels_are_identity():
    codec = _codec((8, 8, 8))
    data = _random_bytes(codec.frame_data_byte_count, seed=3)
    assert codec.data_to_frame(data) == data


def test_zero_data_is_centred():
    codec = _codec((1, 2, 1))
    frame = codec.data_to_frame(bytes(codec.frame_data_byte_count))
    triplets = {tuple(frame[i:i + 3]) for i in range(0, len(frame), 3)}
    assert triplets == {(128, 64, 128)}


def test_decoding_tolerates_small_noise():
    codec = _codec((1, 2, 1))
    data = _random_bytes(codec.frame_data_byte_count, seed=11)
    rng = random.Random(5)
    noisy = bytes(
        max(0, min(255, value + rng.randint(-20, 20)))
        for value in codec.data_to_frame(data)
    )
    assert codec.frame_to_data(noisy) == data


def test_data_to_frame_wrong_length():
    codec = _codec((1, 2, 1))
    with pytest.raises(ConversionError):
        codec.data_to_frame(bytes(codec.frame_data_byte_count + 1))


def test_frame_to_data_wrong_length():
    codec = _codec((1, 2, 1))
    with pytest.raises(ConversionError):
        codec.frame_to_data(bytes(codec.frame_data_unit_count * 3 - 1))


@pytest.mark.parametrize(
    "args",
    [
        ((9, 1, 1), 1, 30, (8, 4), (4, 2)),
        ((1, 2, 1), 31, 30, (8, 4), (4, 2)),
        ((1, 2, 1), 0, 30, (8, 4), (4, 2)),
        ((1, 2, 1), 7, 30, (8, 4), (4, 2)),
        ((1, 2, 1), 1, 30, (9, 4), (4, 2)),
        ((1, 2, 1), 1, 30, (8, 5), (4, 2)),
        ((1, 2, 1), 1, 30, (4, 4), (4, 2)),
        ((1, 2, 1), 1, 30, (8, 2), (4, 2)),
        ((1, 1, 1), 1, 30, (2, 2), (1, 1)),
    ],
)
def test_invalid_settings_rejected(args):
    with pytest.raises(ConversionError):
        FrameCodec(*args)


def test_valid_settings_stored():
    codec = FrameCodec((1, 2, 1), 1, 30, (1920, 1080), (192, 108))
    assert codec.color_bits == (1, 2, 1)
    assert codec.total_bits == 4
    assert (codec.data_width, codec.data_height) == (192, 108)
    assert (codec.frame_width, codec.frame_height) == (1920, 1080)
    assert codec.frame_data_unit_count == 192 * 108