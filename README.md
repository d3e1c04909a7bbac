# mlsping

`mlsping` sends a train of ICMP Echo Requests at a fixed rate. Each packet gets
either a small (56-byte) or a large (1472-byte) payload, chosen by a binary
sequence. It records when each reply comes back. The binary sequence is either
read from a file or generated as a maximum-length sequence (MLS) from a
linear-feedback shift register. When the run ends, the per-packet timings and a
summary go into a data directory for later analysis.

The package also contains:

- a pure-Python AES (ECB, CBC and CTR modes; 16-, 24- or 32-byte keys). The MLS
  generator can use it to draw seeds from a keystream.
- an MLS generator that can be used on its own.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Running a probe

Sending raw ICMP needs a raw socket, so run the command as root or with
`CAP_NET_RAW`:

```
mlsping <destination> <packets> <frequency> <mode> <sequence_source> <host_label> --active|--listen
```

- `destination` must be an IPv4 address.
- `packets` and `frequency` (in Hz) must be positive integers.
- `mode` is `1` to read the sequence from a file. Any other value generates an MLS.
- In mode `1`, `sequence_source` is the path to a file of whitespace-separated
  `0`/`1` values. Any other value is an error. If the file holds fewer values
  than packets, a warning is issued and the missing values are filled with `0`.
- In the MLS mode, `sequence_source` has the form `n<bits> s<seed>`, for example
  `"n10 s144"`. It gives an MLS of `2^bits - 1` values; `bits` is clamped to
  2–32. The seed must have a set bit among its low `bits` bits. Asking for more
  packets than the MLS has values is an error.
- `--active` starts sending at once. `--listen` waits until an Echo Request
  arrives from the destination, then starts sending.

A `1` in the sequence sends a 1472-byte payload, and a `0` sends a 56-byte
payload. The receiver stops once no relevant reply has arrived for 3 seconds.

Example:

```
sudo mlsping 192.0.2.10 1023 500 2 "n10 s144" hostA --active
```

### Output

Before running, create `setup/sequence_counter.txt` in the working directory.
It holds the starting experiment number, for example `0`. After sending, the
command reads this file and writes the number back incremented. If the file is
missing or unreadable, the command reports the error and exits with status 1
without writing results.

Results go to `data/<experiment>_<packets>_<signal>_<frequency>_<host_label>/`.
`<signal>` is the base name of `sequence_source` with its extension removed. The
directory holds these files:

- `stats.json` — start and end times, total time, timer frequency, average
  sending rate, signal source and mode, and received count and percentage. It
  also has the wall-clock timestamps of program start, sending start and
  collecting start.
- `log.csv` — one row per packet: sequence number, send time, receive time, RTT
  in microseconds, send rate, send interval and payload size. Lost packets have
  `-1` as receive time and RTT.
- `<prefix>_xdata.csv` — frame size per packet in kilobytes: the payload plus
  28 bytes of IP/ICMP and 14 bytes of Ethernet.
- `<prefix>_ydata.csv` — RTT per packet, with `-1.000` for lost packets.

## Printing an MLS

```
mlsping-mls [--bits M] [--seed S]
```

This prints one MLS. The defaults are a 10-bit register and seed 144, which give
1023 bits.

## Library use

```python
from mlsping.mls import MLS
from mlsping.aes import AES

generator = MLS(10, False)
seq = generator.get_seq(144)           # list of 1023 booleans
assert len(seq) == generator.size()

cipher = AES(bytes(32), bytes(16))
stream = cipher.ctr_xcrypt(b"\x00" * 64)
```

`MLS(nbits, True)` ignores the seed passed to `get_seq`. It takes each seed from
an AES-256-CTR keystream instead, keyed from `os.urandom`.

Other modules:

- `mlsping.aes` also provides `expand_key`, and `AES.encrypt_block`,
  `decrypt_block`, `cbc_encrypt`, `cbc_decrypt` and `set_iv`.
- `mlsping.icmp` provides `calculate_checksum`, `build_echo_request` and
  `parse_packet`. `parse_packet` returns a `ReceivedPacket`.
- `mlsping.sequence` provides `generate_sequence`, `read_sequence_file` and
  `parse_mls_spec`. It raises `SequenceError` on bad input.
- `mlsping.report` provides `PingRecord`, `RunSummary` and `write_results`, plus
  the functions that write each result file.
- `mlsping.prober.Prober` runs a probe on a socket you supply, or opens its own
  raw socket.

## What it does not do

Only IPv4 is supported. There is no IPv6, no hostname resolution and no
analysis or plotting of the recorded data. Results are written only as the
files listed above.