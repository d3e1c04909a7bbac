"""Maximum-length sequence (MLS) generation with a Fibonacci-style LFSR.

Seeds come either from the caller or, when AES is enabled, from an
AES-256-CTR keystream keyed from the operating system's entropy source.
"""

from __future__ import annotations

import argparse
import os
from itertools import cycle, islice

from mlsping.aes import AES

MIN_BITS = 2
MAX_BITS = 32

TAPS: dict[int, tuple[int, ...]] = {
    2: (1,),
    3: (2,),
    4: (3,),
    5: (3,),
    6: (5,),
    7: (6,),
    8: (7, 6, 1),
    9: (5,),
    10: (7,),
    11: (9,),
    12: (11, 10, 4),
    13: (12, 11, 8),
    14: (13, 12, 2),
    15: (14,),
    16: (15, 13, 4),
    17: (14,),
    18: (11,),
    19: (18, 17, 14),
    20: (17,),
    21: (19,),
    22: (21,),
    23: (18,),
    24: (23, 22, 17),
    25: (22,),
    26: (25, 24, 20),
    27: (26, 25, 22),
    28: (25,),
    29: (27,),
    30: (29, 28, 7),
    31: (28,),
    32: (31, 30, 10),
}


class MLS:
    """Generator of MLS bit sequences of length 2**nbits - 1."""

    def __init__(self, nbits: int, use_aes: bool = False) -> None:
        self.set_bits(nbits)
        self.use_aes = use_aes
        self._cipher = AES(os.urandom(32), os.urandom(16)) if use_aes else None

    def set_bits(self, nbits: int) -> None:
        """Set the register width, clamped to the supported range."""
        self.nbits = min(max(nbits, MIN_BITS), MAX_BITS)
        self.taps = TAPS[self.nbits]

    def size(self) -> int:
        """Length of each generated sequence."""
        return (1 << self.nbits) - 1

    def _random_seed(self) -> int:
        assert self._cipher is not None
        message = bytes(4) + os.urandom(60)
        stream = self._cipher.ctr_xcrypt(message)
        return int.from_bytes(stream[:4], "little")

    def _run(self, seed: int) -> list[bool]:
        n = self.nbits
        state = [bool((seed >> i) & 1) for i in range(n)]
        seq: list[bool] = []
        for idx in islice(cycle(range(n)), self.size()):
            bit = state[idx]
            seq.append(bit)
            feedback = bit
            for tap in self.taps:
                feedback ^= state[(tap + idx) % n]
            state[idx] = feedback
        return seq

    def get_seq(self, initseed: int = 1) -> list[bool]:
        """Return one MLS, seeded from ``initseed`` or from AES when enabled."""
        if not self.use_aes and (initseed & 0xFFFFFFFF) & self.size() == 0:
            raise ValueError(
                f"seed {initseed} has no set bit among the low {self.nbits} bits; "
                "the register would stay all zeros"
            )
        while True:
            seed = self._random_seed() if self.use_aes else initseed & 0xFFFFFFFF
            seq = self._run(seed)
            if any(seq):
                return seq


def main(argv: list[str] | None = None) -> int:
    """Print one MLS generated from a fixed seed."""
    parser = argparse.ArgumentParser(description="Generate a maximum-length sequence.")
    parser.add_argument("--bits", type=int, default=10, help="register width m")
    parser.add_argument("--seed", type=int, default=144, help="initial register value")
    args = parser.parse_args(argv)

    generator = MLS(args.bits, False)
    print(f"m = {generator.nbits} ({generator.size()} bits per sequence : L=2^m-1)")
    print()
    print("Generating 1 MLS sequence")
    seq = generator.get_seq(args.seed)
    print("Sequence #1: " + " ".join("1" if bit else "0" for bit in seq))
    return 0