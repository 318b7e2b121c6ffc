"""General helpers: unique directory names, hex strings and durations."""

import os
from datetime import datetime, timedelta

_MAX_MILLISECONDS = 2**63 - 1


def generate_unique_timestamp_dir(base_dir):
    """Return a path from ``base_dir`` and the current timestamp that does not exist yet.

    If the plain timestamp is taken, a counter prefix is tried, increasing until free.
    """
    timestamp = datetime.now().strftime("%Y-%m-%dT%H:%M:%S")
    candidate = f"{base_dir}{timestamp}"
    counter = 1
    while os.path.exists(candidate):
        candidate = f"{base_dir}{counter}_{timestamp}"
        counter += 1
    return candidate


def bytes_to_hex_string(data):
    """Return ``data`` as one lower-case hex string prefixed with "0x"."""
    return "0x" + bytes(data).hex()


def format_duration(seconds):
    """Format a duration, given in seconds or as a timedelta, in human readable form."""
    try:
        duration = seconds if isinstance(seconds, timedelta) else timedelta(seconds=seconds)
    except OverflowError:
        return "Duration too large"
    if duration < timedelta(0):
        raise ValueError("Duration must not be negative.")
    micros = duration // timedelta(microseconds=1)
    if micros // 1000 > _MAX_MILLISECONDS:
        return "Duration too large"

    if micros < 1000:
        return f"{micros} µs"
    if micros < 1_000_000:
        return f"{micros // 1000} ms"
    total_seconds = micros // 1_000_000
    if total_seconds < 60:
        return f"{total_seconds} s"
    hours, rest = divmod(total_seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02}:{minutes:02}:{secs:02}"