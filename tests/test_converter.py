import random
import subprocess
import tempfile
from unittest import mock

import pytest
from PIL import Image

from vortexkey.codec import ConversionError
from vortexkey.constants import DOWNSAMPLE_SCALER, PREBUFFER_FRAMES
from vortexkey.converter import Converter, FileReport
from vortexkey.error_correction import HammingReport
from vortexkey.filesys import get_framebuffer_folder


@pytest.fixture(autouse=True)
def temp_root(tmp_path, monkeypatch):
    root = tmp_path / "tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


@pytest.fixture
def converter():
    return Converter((1, 2, 1), 1, 30, (320, 180), (32, 18))


def _simulate_split():
    """Turn combine frames into upscaled split frames, as ffmpeg would."""
    folder = get_framebuffer_folder()
    combine = sorted(folder.glob("combine*.png"))
    for index, frame in enumerate(combine, start=1):
        with Image.open(frame) as image:
            big = image.resize(
                (image.width * DOWNSAMPLE_SCALER, image.height * DOWNSAMPLE_SCALER),
                Image.NEAREST,
            )
        big.save(folder / f"split{index:09d}.png")
        frame.unlink()
    return sorted(folder.glob("split*.png"))


def _payload(size):
    rng = random.Random(1234)
    return bytes(rng.randrange(256) for _ in range(size))


def test_file_report_from_hamming_report():
    report = FileReport.from_hamming_report(HammingReport(2, 1), True)
    assert report == FileReport(corrected_errors=2, uncorrected_errors=1, hash_match=True)


def test_round_trip(converter, tmp_path):
    source = tmp_path / "input.bin"
    data = _payload(500)
    source.write_bytes(data)
    converter.deconstruct_file(source)
    _simulate_split()
    output = tmp_path / "output.bin"
    report = converter.reconstruct_file(output, False)
    assert output.read_bytes() == data
    assert report == FileReport(0, 0, True)


def test_prebuffer_frames_are_zero(converter, tmp_path):
    source = tmp_path / "input.bin"
    source.write_bytes(_payload(40))
    converter.deconstruct_file(source)
    frames = sorted(get_framebuffer_folder().glob("combine*.png"))
    zero_pixels = converter.data_to_frame(bytes(converter.frame_data_byte_count))
    for frame in frames[:PREBUFFER_FRAMES]:
        with Image.open(frame) as image:
            assert image.convert("RGB").tobytes() == zero_pixels
    with Image.open(frames[PREBUFFER_FRAMES]) as image:
        assert image.convert("RGB").tobytes() != zero_pixels
        assert image.size == (32, 18)


def test_single_bit_error_is_corrected(converter, tmp_path):
    source = tmp_path / "input.bin"
    data = _payload(500)
    source.write_bytes(data)
    converter.deconstruct_file(source)
    splits = _simulate_split()
    target = splits[PREBUFFER_FRAMES + 1]
    with Image.open(target) as opened:
        image = opened.convert("RGB")
    pixels = image.load()
    red, green, blue = pixels[0, 0]
    flipped = red ^ 0x80
    for y in range(DOWNSAMPLE_SCALER):
        for x in range(DOWNSAMPLE_SCALER):
            pixels[x, y] = (flipped, green, blue)
    image.save(target)
    output = tmp_path / "output.bin"
    report = converter.reconstruct_file(output, False)
    assert report.corrected_errors == 1
    assert report.uncorrected_errors == 0
    assert report.hash_match is True
    assert output.read_bytes() == data


def test_reconstruct_refuses_existing_output(converter, tmp_path):
    source = tmp_path / "input.bin"
    source.write_bytes(_payload(30))
    converter.deconstruct_file(source)
    _simulate_split()
    output = tmp_path / "output.bin"
    output.write_bytes(b"keep")
    with pytest.raises(FileExistsError):
        converter.reconstruct_file(output, False)
    assert output.read_bytes() == b"keep"


def test_reconstruct_overwrites_when_allowed(converter, tmp_path):
    source = tmp_path / "input.bin"
    data = _payload(30)
    source.write_bytes(data)
    converter.deconstruct_file(source)
    _simulate_split()
    output = tmp_path / "output.bin"
    output.write_bytes(b"old")
    report = converter.reconstruct_file(output, True)
    assert report.hash_match is True
    assert output.read_bytes() == data


def test_reconstruct_without_header_frame(converter, tmp_path):
    folder = get_framebuffer_folder()
    converter.save_buffer_frame(folder / "combine000000000000.png")
    _simulate_split()
    with pytest.raises(ConversionError, match="VERSION_CODE"):
        converter.reconstruct_file(tmp_path / "out.bin", False)


def test_reconstruct_empty_file_reports_zero_length(converter, tmp_path):
    source = tmp_path / "empty.bin"
    source.write_bytes(b"")
    converter.deconstruct_file(source)
    _simulate_split()
    with pytest.raises(ConversionError, match="zero"):
        converter.reconstruct_file(tmp_path / "out.bin", False)


def test_reconstruct_requires_frames_large_enough_for_header(tmp_path):
    small = Converter((1, 1, 1), 1, 1, (16, 16), (8, 8))
    with pytest.raises(ConversionError):
        small.reconstruct_file(tmp_path / "out.bin", False)


def test_save_data_frame_too_long(converter, tmp_path):
    with pytest.raises(ConversionError, match="longer than expected"):
        converter.save_data_frame(bytes(converter.frame_data_byte_count + 1), tmp_path / "f.png")


def test_save_data_frame_pads_short_data(converter, tmp_path):
    path = tmp_path / "f.png"
    data = b"\x12\x34\x56"
    converter.save_data_frame(data, path)
    padded = data + bytes(converter.frame_data_byte_count - len(data))
    with Image.open(path) as image:
        assert image.convert("RGB").tobytes() == converter.data_to_frame(padded)


def test_average_blocks_truncates(tmp_path):
    conv = Converter((8, 8, 8), 1, 1, (2, 2), (1, 1))
    image = Image.new("RGB", (2, 2))
    image.putdata([(1, 10, 255), (2, 10, 255), (2, 11, 255), (2, 10, 254)])
    path = tmp_path / "block.png"
    image.save(path)
    assert conv.average_blocks(path) == bytes([1, 10, 254])


def test_average_blocks_rejects_wrong_size(converter, tmp_path):
    path = tmp_path / "wrong.png"
    Image.new("RGB", (32, 18)).save(path)
    with pytest.raises(ConversionError, match="width"):
        converter.average_blocks(path)


def test_average_blocks_recovers_frame_pixels(converter, tmp_path):
    data = _payload(converter.frame_data_byte_count)
    path = tmp_path / "frame.png"
    converter.save_data_frame(data, path)
    with Image.open(path) as image:
        image.resize((64, 36), Image.NEAREST).save(tmp_path / "big.png")
    assert converter.frame_to_data(converter.average_blocks(tmp_path / "big.png")) == data


def test_combine_frames_refuses_existing_output(converter, tmp_path):
    output = tmp_path / "video.mp4"
    output.write_bytes(b"x")
    with mock.patch("subprocess.run") as run:
        with pytest.raises(FileExistsError):
            converter.combine_frames(output, False)
    assert run.call_count == 0


def test_combine_frames_invokes_ffmpeg(converter, tmp_path):
    output = tmp_path / "video.mp4"
    done = subprocess.CompletedProcess([], 0)
    with mock.patch("subprocess.run", return_value=done) as run:
        converter.combine_frames(output, False)
    command = run.call_args.args[0]
    assert command[0] == "/bin/ffmpeg"
    assert command[-1] == str(output)
    assert "scale=320:180:flags=neighbor,format=yuv420p" in command
    assert command[command.index("-r") + 1] == "30"
    assert command[command.index("-framerate") + 1] == "1"


def test_combine_frames_failure_raises(converter, tmp_path):
    failed = subprocess.CompletedProcess([], 1)
    with mock.patch("subprocess.run", return_value=failed):
        with pytest.raises(ConversionError, match="nonzero"):
            converter.combine_frames(tmp_path / "video.mp4", True)


def test_split_video_invokes_ffmpeg(converter, tmp_path):
    stale = get_framebuffer_folder() / "split000000001.png"
    stale.write_bytes(b"old")
    done = subprocess.CompletedProcess([], 0)
    with mock.patch("subprocess.run", return_value=done) as run:
        converter.split_video(tmp_path / "video.mp4")
    command = run.call_args.args[0]
    assert "scale=64:36:flags=neighbor" in command
    assert command[-1].endswith("split%09d.png")
    assert not stale.exists()


def test_split_video_failure_raises(converter, tmp_path):
    failed = subprocess.CompletedProcess([], 2)
    with mock.patch("subprocess.run", return_value=failed):
        with pytest.raises(ConversionError):
            converter.split_video(tmp_path / "video.mp4")