# vortexkey

`vortexkey` turns any file into a video that holds up under lossy
compression. It can also read the file back out of such a video.

The data is protected with a Hamming(31,26) code and an extra overall parity
bit. Every frame stores the bits as coloured blocks, and each block carries a
few bits in each of its red, green and blue channels. The first data frame
begins with a header that is written three times. Each copy holds a version
code, the data length and a SHA-256 hash of the data. When the header is read
back, each bit is taken by majority vote over the three copies. Blank frames
come before and after the data frames.

When the file is rebuilt, the tool reports how many errors it corrected and how
many it could not correct. It also checks the hash. If the hash does not match,
a message goes to standard error, and the file is still written.

## Requirements

- Python 3.10 or later
- Pillow
- An `ffmpeg` executable at `/bin/ffmpeg`. It is needed to build videos and to
  split them back into frames. It is not needed for the `split` mode.

Intermediate frames are kept in a `vortexkey_framebuffer` directory inside the
system temporary directory. That directory is emptied at the start of each
encoding run and each video split.

## Installation

```
pip install .
```

## Usage

To encode a file into a video, use mode `dtv`, which is the default:

```
vortexkey -i data.bin output.mp4
```

To decode a file from a video, use mode `vtd`:

```
vortexkey -m vtd -i output.mp4 restored.bin
```

To write only the PNG frames into the frame buffer directory, without building
a video, use mode `split`. The output file argument is required but not used:

```
vortexkey -m split -i data.bin unused_output
```

### Options

| Option | Default | Meaning |
| --- | --- | --- |
| `-i INPUTFILE` | required | Input file: the data to encode, or the video to decode |
| `-y` | off | Overwrite the output file if it already exists |
| `-m {dtv,vtd,split}` | `dtv` | Operating mode |
| `-c COLORBITS` | `121` | Bits per colour channel, given as three digits R, G, B (111–888) |
| `--video-fps` | `30` | Framerate of the output video (1–60) |
| `--data-fps` | `1` | Data frames per second (1–60); must divide the video framerate |
| `-f`, `--frame-resolution` | `1080p` | One of 240p, 360p, 480p, 720p, 1080p, 1440p, 4k, 8k |
| `-d`, `--data-pixel-size` | `10` | Side length of one data block in pixels (1–100) |
| `-V`, `--version` | | Print the version and exit |

To decode a video, give the same colour bits, data fps, resolution and data
pixel size that were used to encode it.

Each run prints how long each stage took. If a file is missing or a setting is
invalid, the command prints `Error: ...` to standard error and exits with
status 1. For example, the frame size might not divide evenly by the data
pixel size, or a frame might not hold a whole number of bytes.

## Library use

```python
from vortexkey.error_correction import encode_with_hamming_31_26, decode_with_hamming_31_26

encoded = encode_with_hamming_31_26(b"thirteen byte")
decoded, report = decode_with_hamming_31_26(encoded)
assert decoded == b"thirteen byte"
print(report.corrected_errors, report.uncorrected_errors)
```

The library is split into these modules:

- `vortexkey.error_correction` holds the Hamming code.
  - `hamming_31_26_encode` and `hamming_31_26_decode` work on single code words.
  - `encode_with_hamming_31_26` and `decode_with_hamming_31_26` work on byte
    strings. Input for encoding must be a multiple of 13 bytes, and input for
    decoding a multiple of 16 bytes.
  - `HammingStatus` and `HammingReport` describe what was found while decoding.
- `vortexkey.codec` holds the frame layout.
  - `FrameCodec` checks the settings. It converts one frame of bytes to RGB
    triplets with `data_to_frame` and back with `frame_to_data`.
  - `data_block_header` builds the header and `read_data_header` reads it.
  - Invalid settings or sizes raise `ConversionError`, a subclass of
    `ValueError`.
- `vortexkey.converter.Converter` runs the whole pipeline.
  - `deconstruct_file` writes the frames.
  - `combine_frames` builds the video with ffmpeg.
  - `split_video` splits a video back into frames with ffmpeg.
  - `average_blocks` reads one split frame.
  - `reconstruct_file` rebuilds the file and returns a `FileReport`.
- `vortexkey.cli` holds the command.
  - `parse_args` and `Args.to_converter` handle the arguments.
  - `execute_args` and `main` run the command.
- `vortexkey.constants` and `vortexkey.filesys` hold the settings and the
  frame buffer paths.
- `vortexkey.utils` holds `bytes_to_hex_string`, `format_duration` and
  `generate_unique_timestamp_dir`.

## What it does not do

- The ffmpeg path, the H.264 settings (preset `veryfast`, CRF 20, bt709,
  yuv420p) and the number of blank frames are fixed in
  `vortexkey.constants`. The command has no options for them.
- The whole input file is loaded into memory. The data is not streamed.
- It has not been made to work on Windows.