"""Result records and the files a probing run leaves behind."""

from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass
from pathlib import Path

MISSING_VALUE = -1.0
MAX_COMMON_PREFIX_LENGTH = 200
# IPv4 header (20) + ICMP header (8) + Ethernet header (14).
FRAME_OVERHEAD = 28 + 14

LOG_HEADER = (
    "Sequence,SendTime(s),ReceiveTime(s),RTT(us),SendRate(Hz),"
    "SendInterval(us),PayloadSize(bytes)"
)

_UINT = re.compile(r"\s*\+?(\d+)")


@dataclass
class PingRecord:
    """What is known about one probe."""

    sequence: int = 0
    send_time: float = 0.0
    receive_time: float = 0.0
    rtt: float = 0.0
    send_rate: float = 0.0
    send_interval: float = 0.0
    is_received: bool = False
    payload_size: int = 0

    @property
    def receive_time_or_missing(self) -> float:
        return self.receive_time if self.is_received else MISSING_VALUE

    @property
    def rtt_or_missing(self) -> float:
        return self.rtt if self.is_received else MISSING_VALUE


@dataclass
class RunSummary:
    """Statistics of one run, as written to stats.json."""

    experiment_sequence: int
    total_packets: int
    signal_source: str
    signal_source_mode: int
    host_label: str
    timer_frequency: int
    start_time: float
    end_time: float
    received_count: int
    program_start_time: str
    sending_start_time: str
    collecting_start_time: str | None = None

    @property
    def total_time(self) -> float:
        return self.end_time - self.start_time

    @property
    def average_sending_rate(self) -> float:
        total = self.total_time
        return self.total_packets / total if total > 0 else 0.0

    @property
    def received_percentage(self) -> float:
        if self.total_packets <= 0:
            return 0.0
        return 100.0 * self.received_count / self.total_packets


def current_time_string() -> str:
    """Local wall-clock time as ``YYYY-MM-DD HH:MM:SS``."""
    return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())


def ensure_directory_exists(path) -> Path:
    """Create ``path`` and any missing parents."""
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def build_common_prefix(sequence, packets, signal_file, freq, host_label) -> str:
    """Name shared by the run's data directory and its data files."""
    prefix = f"{sequence}_{packets}_{signal_file}_{freq}_{host_label}"
    if len(prefix) >= MAX_COMMON_PREFIX_LENGTH:
        raise ValueError("common prefix exceeds the allowed length")
    return prefix


def signal_name(source: str) -> str:
    """Base name of a signal source with its last extension removed."""
    name = source.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    return name[:dot] if dot >= 0 else name


def next_experiment_sequence(path) -> int:
    """Read the experiment counter and store its successor in place."""
    with open(path, "r+", encoding="ascii") as handle:
        match = _UINT.match(handle.read())
        if match is None:
            raise ValueError(f"failed to read sequence number from {path}")
        value = int(match.group(1))
        handle.seek(0)
        handle.write(str(value + 1))
    return value


def write_stats(path, summary: RunSummary) -> None:
    """Write the run statistics as JSON."""
    collecting = summary.collecting_start_time or current_time_string()

    def text(value: str) -> str:
        return json.dumps(value, ensure_ascii=False)

    lines = [
        f'  "experiment_sequence": {summary.experiment_sequence}',
        f'  "start_time": {summary.start_time:.6f}',
        f'  "end_time": {summary.end_time:.6f}',
        f'  "total_time": {summary.total_time:.6f}',
        f'  "timer_frequency": {summary.timer_frequency}',
        f'  "average_sending_rate": {summary.average_sending_rate:.2f}',
        f'  "signal_source_mode": {int(summary.signal_source_mode)}',
        f'  "signal_source": {text(summary.signal_source)}',
        f'  "received_count": {summary.received_count}',
        f'  "total_packets": {summary.total_packets}',
        f'  "received_percentage": {summary.received_percentage:.1f}',
        f'  "program start time": {text(summary.program_start_time)}',
        f'  "sending start time": {text(summary.sending_start_time)}',
        f'  "collecting start time": {text(collecting)}',
    ]
    Path(path).write_text("{\n" + ",\n".join(lines) + "\n}\n", encoding="utf-8")


def write_log(path, records) -> None:
    """Write one CSV row per probe."""
    rows = [LOG_HEADER]
    rows.extend(
        f"{r.sequence},{r.send_time:.9f},{r.receive_time_or_missing:.9f},"
        f"{r.rtt_or_missing:.3f},{r.send_rate:.2f},{r.send_interval:.3f},{r.payload_size}"
        for r in records
    )
    Path(path).write_text("\n".join(rows) + "\n", encoding="utf-8")


def write_xdata(path, records) -> None:
    """Write each probe's frame size in kilobytes."""
    rows = ["Sequence"]
    rows.extend(f"{(r.payload_size + FRAME_OVERHEAD) * 0.001:.3f}" for r in records)
    Path(path).write_text("\n".join(rows) + "\n", encoding="utf-8")


def write_ydata(path, records) -> None:
    """Write each probe's round-trip time in microseconds."""
    rows = ["RTT(us)"]
    rows.extend(f"{r.rtt_or_missing:.3f}" for r in records)
    Path(path).write_text("\n".join(rows) + "\n", encoding="utf-8")


def write_results(base_dir, summary: RunSummary, records) -> Path:
    """Write all result files under ``base_dir/data/<prefix>`` and return that directory."""
    records = list(records)
    prefix = build_common_prefix(
        summary.experiment_sequence,
        summary.total_packets,
        signal_name(summary.signal_source),
        summary.timer_frequency,
        summary.host_label,
    )
    data_dir = ensure_directory_exists(Path(base_dir) / "data" / prefix)
    write_stats(data_dir / "stats.json", summary)
    write_log(data_dir / "log.csv", records)
    write_xdata(data_dir / f"{prefix}_xdata.csv", records)
    write_ydata(data_dir / f"{prefix}_ydata.csv", records)
    return data_dir