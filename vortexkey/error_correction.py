"""Hamming(31,26) error correction with an extra overall parity bit."""

from dataclasses import dataclass
from enum import Enum

from vortexkey.constants import (
    BIT_MASK_26,
    BIT_MASK_31,
    BYTES_U32,
    HAMMING_CHUNK_BYTES_31_26,
    HAMMING_CHUNK_BYTES_TOTAL_31_26,
    HAMMING_DATA_BITS_31_26,
    HAMMING_DATA_POSITIONS_31_26,
    HAMMING_PARITY_POSITIONS_31_26,
)

_WORDS_PER_CHUNK = HAMMING_CHUNK_BYTES_TOTAL_31_26 // BYTES_U32


class HammingStatus(Enum):
    """Outcome of checking one code word."""

    NO_ERROR = "no_error"
    CORRECTED_SINGLE = "corrected_single"
    UNCORRECTABLE = "uncorrectable"


@dataclass(frozen=True)
class HammingReport:
    """Counts of corrected and uncorrectable errors found while decoding."""

    corrected_errors: int = 0
    uncorrected_errors: int = 0


def _parity(word, p):
    """Parity over the bits of ``word`` whose one-based position has bit ``p`` set."""
    return sum((word >> bit) & 1 for bit in range(31) if (bit + 1) & p) & 1


def hamming_31_26_encode(data_bits):
    """Encode 26 data bits into a 32-bit word (Hamming(31,26) plus overall parity)."""
    data_bits &= BIT_MASK_26
    code_word = 0
    for i, offset in enumerate(HAMMING_DATA_POSITIONS_31_26):
        code_word |= ((data_bits >> i) & 1) << offset
    for p in HAMMING_PARITY_POSITIONS_31_26:
        code_word |= _parity(code_word, p) << (p - 1)
    overall_parity = bin(code_word).count("1") & 1
    return code_word | (overall_parity << 31)


def hamming_31_26_decode(code_word):
    """Check and correct a 32-bit code word; return (data_bits, HammingStatus)."""
    hamming_code = code_word & BIT_MASK_31
    overall_parity = bin(code_word & 0xFFFFFFFF).count("1") & 1
    syndrome = 0
    for i, p in enumerate(HAMMING_PARITY_POSITIONS_31_26):
        if _parity(hamming_code, p):
            syndrome |= 1 << i

    if syndrome == 0 and not overall_parity:
        status = HammingStatus.NO_ERROR
    elif syndrome == 0:
        # The error sits in the overall parity bit, which is not part of the data.
        status = HammingStatus.CORRECTED_SINGLE
    elif overall_parity:
        hamming_code ^= 1 << (syndrome - 1)
        status = HammingStatus.CORRECTED_SINGLE
    else:
        status = HammingStatus.UNCORRECTABLE

    data = 0
    for i, offset in enumerate(HAMMING_DATA_POSITIONS_31_26):
        data |= ((hamming_code >> offset) & 1) << i
    return data, status


def encode_with_hamming_31_26(data):
    """Encode bytes (a multiple of 13 long) into Hamming-protected bytes, 16 per 13."""
    data = bytes(data)
    if len(data) % HAMMING_CHUNK_BYTES_31_26:
        raise ValueError(
            f"Data length must be a multiple of {HAMMING_CHUNK_BYTES_31_26} bytes."
        )
    encoded = bytearray()
    for start in range(0, len(data), HAMMING_CHUNK_BYTES_31_26):
        chunk = int.from_bytes(data[start:start + HAMMING_CHUNK_BYTES_31_26], "big")
        for shift in reversed(range(_WORDS_PER_CHUNK)):
            word = (chunk >> (shift * HAMMING_DATA_BITS_31_26)) & BIT_MASK_26
            encoded += hamming_31_26_encode(word).to_bytes(BYTES_U32, "little")
    return bytes(encoded)


def decode_with_hamming_31_26(data):
    """Decode Hamming-protected bytes (a multiple of 16 long).

    Returns the corrected data and a HammingReport.
    """
    data = bytes(data)
    if len(data) % HAMMING_CHUNK_BYTES_TOTAL_31_26:
        raise ValueError(
            f"Data length must be a multiple of {HAMMING_CHUNK_BYTES_TOTAL_31_26} bytes."
        )
    output = bytearray()
    corrected = 0
    uncorrected = 0
    for start in range(0, len(data), HAMMING_CHUNK_BYTES_TOTAL_31_26):
        chunk = 0
        block = data[start:start + HAMMING_CHUNK_BYTES_TOTAL_31_26]
        for word_start in range(0, len(block), BYTES_U32):
            word = int.from_bytes(block[word_start:word_start + BYTES_U32], "little")
            bits, status = hamming_31_26_decode(word)
            if status is HammingStatus.CORRECTED_SINGLE:
                corrected += 1
            elif status is HammingStatus.UNCORRECTABLE:
                uncorrected += 1
            chunk = (chunk << HAMMING_DATA_BITS_31_26) | bits
        output += chunk.to_bytes(HAMMING_CHUNK_BYTES_31_26, "big")
    return bytes(output), HammingReport(corrected, uncorrected)