"""Sources of the 0/1 sequence that selects each probe's payload size."""

from __future__ import annotations

import enum
import re
import warnings
from pathlib import Path

from mlsping.mls import MLS


class SequenceMode(enum.IntEnum):
    """Where the sequence comes from."""

    FILE = 1
    RANDOM = 2


class SequenceError(ValueError):
    """The sequence could not be read or generated."""


_SPEC = re.compile(r"n\s*([+-]?\d+)\s*s\s*([+-]?\d+)")
_INT = re.compile(r"\s*([+-]?\d+)")


def parse_mls_spec(spec: str) -> tuple[int, int]:
    """Parse an ``n<bits> s<seed>`` specification into (nbits, seed)."""
    match = _SPEC.match(spec)
    if match is None:
        raise SequenceError(f"failed to parse MLS specification: {spec!r}")
    return int(match.group(1)), int(match.group(2)) & 0xFFFFFFFF


def read_sequence_file(path, total_packets: int) -> list[int]:
    """Read up to ``total_packets`` values of 0 or 1, padding with zeros."""
    try:
        text = Path(path).read_text()
    except OSError as exc:
        raise SequenceError(f"failed to open sequence file: {path}") from exc

    values: list[int] = []
    pos = 0
    while len(values) < total_packets:
        match = _INT.match(text, pos)
        if match is None:
            break
        value = int(match.group(1))
        if value not in (0, 1):
            raise SequenceError(f"invalid value in sequence file at line {len(values) + 1}")
        values.append(value)
        pos = match.end()

    if len(values) < total_packets:
        warnings.warn(
            "sequence file contains fewer entries than required "
            f"({len(values)}/{total_packets})",
            stacklevel=2,
        )
        values.extend([0] * (total_packets - len(values)))
    return values


def generate_sequence(total_packets: int, source: str, mode) -> list[int]:
    """Read the sequence from a file, or generate it from an MLS specification."""
    if mode == SequenceMode.FILE:
        return read_sequence_file(source, total_packets)
    nbits, seed = parse_mls_spec(source)
    bits = MLS(nbits, False).get_seq(seed)
    if total_packets > len(bits):
        raise SequenceError(
            f"MLS of {len(bits)} bits is shorter than the {total_packets} packets requested"
        )
    return [int(bit) for bit in bits[:total_packets]]