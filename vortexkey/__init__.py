"""Encode arbitrary data into compression resistant video frames and back, with Hamming error correction."""

__version__ = "1.0.1"