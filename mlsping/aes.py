"""AES block cipher with ECB, CBC and CTR modes of operation.

The key size selects the variant: 16 bytes for AES-128, 24 for AES-192
and 32 for AES-256. The block size is always 16 bytes.
"""

from __future__ import annotations

BLOCK_SIZE = 16
KEY_SIZES = (16, 24, 32)

_SBOX = bytes.fromhex(
    "637c777bf26b6fc53001672bfed7ab76"
    "ca82c97dfa5947f0add4a2af9ca472c0"
    "b7fd9326363ff7cc34a5e5f171d83115"
    "04c723c31896059a071280e2eb27b275"
    "09832c1a1b6e5aa0523bd6b329e32f84"
    "53d100ed20fcb15b6acbbe394a4c58cf"
    "d0efaafb434d338545f9027f503c9fa8"
    "51a3408f929d38f5bcb6da2110fff3d2"
    "cd0c13ec5f974417c4a77e3d645d1973"
    "60814fdc222a908846eeb814de5e0bdb"
    "e0323a0a4906245cc2d3ac629195e479"
    "e7c8376d8dd54ea96c56f4ea657aae08"
    "ba78252e1ca6b4c6e8dd741f4bbd8b8a"
    "703eb5664803f60e613557b986c11d9e"
    "e1f8981169d98e949b1e87e9ce5528df"
    "8ca1890dbfe6426841992d0fb054bb16"
)

_RSBOX = bytes.fromhex(
    "52096ad53036a538bf40a39e81f3d7fb"
    "7ce339829b2fff87348e4344c4dee9cb"
    "547b9432a6c2233dee4c950b42fac34e"
    "082ea16628d924b2765ba2496d8bd125"
    "72f8f66486689816d4a45ccc5d65b692"
    "6c704850fdedb9da5e154657a78d9d84"
    "90d8ab008cbcd30af7e45805b8b34506"
    "d02c1e8fca3f0f02c1afbd0301138a6b"
    "3a9111414f67dcea97f2cfcef0b4e673"
    "96ac7422e7ad3585e2f937e81c75df6e"
    "47f11a711d29c5896fb7620eaa18be1b"
    "fc563e4bc6d279209adbc0fe78cd5af4"
    "1fdda8338807c731b11210592780ec5f"
    "60517fa919b54a0d2de57a9f93c99cef"
    "a0e03b4dae2af5b0c8ebbb3c83539961"
    "172b047eba77d626e169146355210c7d"
)

_RCON = bytes((0x8D, 0x01, 0x02, 0x04, 0x08, 0x10, 0x20, 0x40, 0x80, 0x1B, 0x36))

# State byte at flat index c*4 + r holds row r of column c.
_SHIFT = tuple(((i // 4 + i % 4) % 4) * 4 + i % 4 for i in range(BLOCK_SIZE))
_INV_SHIFT = tuple(((i // 4 - i % 4) % 4) * 4 + i % 4 for i in range(BLOCK_SIZE))


def _rounds_for(key_len: int) -> int:
    return key_len // 4 + 6


def _check_key(key: bytes) -> bytes:
    key = bytes(key)
    if len(key) not in KEY_SIZES:
        raise ValueError(f"AES key must be 16, 24 or 32 bytes long, got {len(key)}")
    return key


def _check_block(block: bytes, what: str = "block") -> bytes:
    block = bytes(block)
    if len(block) != BLOCK_SIZE:
        raise ValueError(f"AES {what} must be {BLOCK_SIZE} bytes long, got {len(block)}")
    return block


def expand_key(key: bytes) -> bytes:
    """Return the expanded key schedule: 16 bytes for each of Nr + 1 round keys."""
    key = _check_key(key)
    nk = len(key) // 4
    total_words = 4 * (_rounds_for(len(key)) + 1)
    schedule = bytearray(key)
    for i in range(nk, total_words):
        temp = bytearray(schedule[-4:])
        if i % nk == 0:
            temp = bytearray(temp[1:] + temp[:1]).translate(_SBOX)
            temp[0] ^= _RCON[i // nk]
        elif nk > 6 and i % nk == 4:
            temp = temp.translate(_SBOX)
        previous = schedule[(i - nk) * 4 : (i - nk + 1) * 4]
        schedule += bytes(a ^ b for a, b in zip(previous, temp))
    return bytes(schedule)


def _xtime(x: int) -> int:
    return ((x << 1) ^ (0x1B if x & 0x80 else 0)) & 0xFF


def _multiply(x: int, y: int) -> int:
    result = 0
    while y:
        if y & 1:
            result ^= x
        x = _xtime(x)
        y >>= 1
    return result


def _xor(a: bytes, b: bytes) -> bytes:
    return bytes(p ^ q for p, q in zip(a, b))


def _mix_columns(state: bytes) -> bytes:
    out = bytearray()
    for c in range(0, BLOCK_SIZE, 4):
        a0, a1, a2, a3 = state[c : c + 4]
        total = a0 ^ a1 ^ a2 ^ a3
        out += bytes(
            (
                a0 ^ total ^ _xtime(a0 ^ a1),
                a1 ^ total ^ _xtime(a1 ^ a2),
                a2 ^ total ^ _xtime(a2 ^ a3),
                a3 ^ total ^ _xtime(a3 ^ a0),
            )
        )
    return bytes(out)


def _inv_mix_columns(state: bytes) -> bytes:
    out = bytearray()
    for c in range(0, BLOCK_SIZE, 4):
        a, b, cc, d = state[c : c + 4]
        out += bytes(
            (
                _multiply(a, 0x0E) ^ _multiply(b, 0x0B) ^ _multiply(cc, 0x0D) ^ _multiply(d, 0x09),
                _multiply(a, 0x09) ^ _multiply(b, 0x0E) ^ _multiply(cc, 0x0B) ^ _multiply(d, 0x0D),
                _multiply(a, 0x0D) ^ _multiply(b, 0x09) ^ _multiply(cc, 0x0E) ^ _multiply(d, 0x0B),
                _multiply(a, 0x0B) ^ _multiply(b, 0x0D) ^ _multiply(cc, 0x09) ^ _multiply(d, 0x0E),
            )
        )
    return bytes(out)


def _increment(counter: bytes) -> bytes:
    value = (int.from_bytes(counter, "big") + 1) % (1 << (8 * BLOCK_SIZE))
    return value.to_bytes(BLOCK_SIZE, "big")


class AES:
    """An AES context: an expanded key and the IV used by CBC and CTR modes."""

    def __init__(self, key: bytes, iv: bytes | None = None) -> None:
        key = _check_key(key)
        self._rounds = _rounds_for(len(key))
        self._round_keys = expand_key(key)
        self._iv: bytes | None = None
        if iv is not None:
            self.set_iv(iv)

    @property
    def iv(self) -> bytes | None:
        """The current IV, advanced by CBC and CTR operations."""
        return self._iv

    def set_iv(self, iv: bytes) -> None:
        """Replace the IV."""
        self._iv = _check_block(iv, "IV")

    def _round_key(self, index: int) -> bytes:
        return self._round_keys[index * BLOCK_SIZE : (index + 1) * BLOCK_SIZE]

    def _require_iv(self) -> bytes:
        if self._iv is None:
            raise ValueError("an IV must be set for this mode of operation")
        return self._iv

    def encrypt_block(self, block: bytes) -> bytes:
        """Encrypt one 16-byte block (ECB)."""
        state = _xor(_check_block(block), self._round_key(0))
        for rnd in range(1, self._rounds):
            state = bytes(state.translate(_SBOX)[p] for p in _SHIFT)
            state = _xor(_mix_columns(state), self._round_key(rnd))
        state = bytes(state.translate(_SBOX)[p] for p in _SHIFT)
        return _xor(state, self._round_key(self._rounds))

    def decrypt_block(self, block: bytes) -> bytes:
        """Decrypt one 16-byte block (ECB)."""
        state = _xor(_check_block(block), self._round_key(self._rounds))
        for rnd in range(self._rounds - 1, 0, -1):
            state = bytes(state[p] for p in _INV_SHIFT).translate(_RSBOX)
            state = _inv_mix_columns(_xor(state, self._round_key(rnd)))
        state = bytes(state[p] for p in _INV_SHIFT).translate(_RSBOX)
        return _xor(state, self._round_key(0))

    @staticmethod
    def _blocks(data: bytes):
        data = bytes(data)
        if len(data) % BLOCK_SIZE:
            raise ValueError(f"data length must be a multiple of {BLOCK_SIZE}, got {len(data)}")
        return (data[i : i + BLOCK_SIZE] for i in range(0, len(data), BLOCK_SIZE))

    def cbc_encrypt(self, data: bytes) -> bytes:
        """Encrypt in CBC mode; the IV is left at the last ciphertext block."""
        chain = self._require_iv()
        out = bytearray()
        for block in self._blocks(data):
            chain = self.encrypt_block(_xor(block, chain))
            out += chain
        self._iv = chain
        return bytes(out)

    def cbc_decrypt(self, data: bytes) -> bytes:
        """Decrypt in CBC mode; the IV is left at the last ciphertext block."""
        chain = self._require_iv()
        out = bytearray()
        for block in self._blocks(data):
            out += _xor(self.decrypt_block(block), chain)
            chain = block
        self._iv = chain
        return bytes(out)

    def ctr_xcrypt(self, data: bytes) -> bytes:
        """Encrypt or decrypt in CTR mode, advancing the counter once per block begun."""
        counter = self._require_iv()
        data = bytes(data)
        out = bytearray()
        for start in range(0, len(data), BLOCK_SIZE):
            keystream = self.encrypt_block(counter)
            counter = _increment(counter)
            out += _xor(data[start : start + BLOCK_SIZE], keystream)
        self._iv = counter
        return bytes(out)