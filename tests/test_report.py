import csv
import json
from datetime import datetime

import pytest

from mlsping.report import (
    LOG_HEADER,
    MISSING_VALUE,
    PingRecord,
    RunSummary,
    build_common_prefix,
    current_time_string,
    ensure_directory_exists,
    next_experiment_sequence,
    signal_name,
    write_log,
    write_results,
    write_stats,
    write_xdata,
    write_ydata,
)


def _records():
    return [
        PingRecord(1, 1.5, 1.5001, 100.0, 1000.0, 0.0, True, 1472),
        PingRecord(2, 1.501, 0.0, 0.0, 1000.0, 1000.0, False, 56),
    ]


def _summary(**overrides):
    values = dict(
        experiment_sequence=4,
        total_packets=2,
        signal_source="signals/mls_10.txt",
        signal_source_mode=1,
        host_label="hostA",
        timer_frequency=1000,
        start_time=10.0,
        end_time=10.5,
        received_count=1,
        program_start_time="2024-01-01 00:00:00",
        sending_start_time="2024-01-01 00:00:01",
        collecting_start_time="2024-01-01 00:00:02",
    )
    values.update(overrides)
    return RunSummary(**values)


def test_current_time_string_round_trips_through_its_format():
    text = current_time_string()
    parsed = datetime.strptime(text, "%Y-%m-%d %H:%M:%S")
    assert parsed.strftime("%Y-%m-%d %H:%M:%S") == text


def test_ensure_directory_exists_creates_nested_and_is_idempotent(tmp_path):
    target = tmp_path / "a" / "b" / "c"
    ensure_directory_exists(target)
    ensure_directory_exists(target)
    assert target.is_dir()


def test_build_common_prefix_joins_fields():
    assert build_common_prefix(3, 100, "sig", 1000, "hostA") == "3_100_sig_1000_hostA"


def test_build_common_prefix_rejects_long_prefix():
    with pytest.raises(ValueError):
        build_common_prefix(1, 1, "x" * 250, 1, "h")


@pytest.mark.parametrize(
    "source, expected",
    [
        ("signals/mls_10.txt", "mls_10"),
        ("plain", "plain"),
        ("dir/sub/b.c.d", "b.c"),
        ("n10 s144", "n10 s144"),
    ],
)
def test_signal_name(source, expected):
    assert signal_name(source) == expected


def test_next_experiment_sequence_increments_in_place(tmp_path):
    counter = tmp_path / "counter.txt"
    counter.write_text("7\n")
    assert next_experiment_sequence(counter) == 7
    assert counter.read_text() == "8\n"
    assert next_experiment_sequence(counter) == 8


def test_next_experiment_sequence_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        next_experiment_sequence(tmp_path / "absent.txt")


def test_next_experiment_sequence_garbage(tmp_path):
    counter = tmp_path / "counter.txt"
    counter.write_text("abc")
    with pytest.raises(ValueError):
        next_experiment_sequence(counter)


def test_summary_properties():
    summary = _summary()
    assert summary.total_time == pytest.approx(0.5)
    assert summary.average_sending_rate == pytest.approx(2 / 0.5)
    assert summary.received_percentage == pytest.approx(50.0)
    assert _summary(end_time=10.0).average_sending_rate == 0.0


def test_write_stats_is_valid_json(tmp_path):
    summary = _summary()
    path = tmp_path / "stats.json"
    write_stats(path, summary)
    data = json.loads(path.read_text())
    assert data["experiment_sequence"] == 4
    assert data["start_time"] == pytest.approx(summary.start_time)
    assert data["total_time"] == pytest.approx(summary.total_time)
    assert data["average_sending_rate"] == pytest.approx(summary.average_sending_rate)
    assert data["signal_source"] == summary.signal_source
    assert data["received_percentage"] == pytest.approx(summary.received_percentage)
    assert data["collecting start time"] == summary.collecting_start_time
    assert list(data)[-1] == "collecting start time"


def test_write_stats_fills_collecting_time(tmp_path):
    path = tmp_path / "stats.json"
    write_stats(path, _summary(collecting_start_time=None))
    data = json.loads(path.read_text())
    datetime.strptime(data["collecting start time"], "%Y-%m-%d %H:%M:%S")
    assert len(data["collecting start time"]) == len("2024-01-01 00:00:00")


def test_write_log_rows(tmp_path):
    records = _records()
    path = tmp_path / "log.csv"
    write_log(path, records)
    lines = path.read_text().splitlines()
    assert lines[0] == LOG_HEADER
    rows = list(csv.reader(lines[1:]))
    assert len(rows) == len(records)
    first, second = rows
    assert int(first[0]) == 1
    assert float(first[2]) == pytest.approx(records[0].receive_time)
    assert float(first[3]) == pytest.approx(records[0].rtt)
    assert int(first[6]) == 1472
    assert float(second[2]) == MISSING_VALUE
    assert float(second[3]) == MISSING_VALUE
    assert len(first[1].split(".")[1]) == 9


def test_write_xdata_tracks_payload_size(tmp_path):
    records = _records()
    path = tmp_path / "x.csv"
    write_xdata(path, records)
    lines = path.read_text().splitlines()
    assert lines[0] == "Sequence"
    values = [float(v) for v in lines[1:]]
    assert values[0] > values[1]
    assert values[0] - values[1] == pytest.approx((1472 - 56) * 0.001)


def test_write_ydata_marks_missing(tmp_path):
    path = tmp_path / "y.csv"
    write_ydata(path, _records())
    lines = path.read_text().splitlines()
    assert lines[0] == "RTT(us)"
    assert float(lines[1]) == pytest.approx(100.0)
    assert float(lines[2]) == MISSING_VALUE


def test_write_results_layout(tmp_path):
    summary = _summary()
    data_dir = write_results(tmp_path, summary, _records())
    prefix = build_common_prefix(4, 2, "mls_10", 1000, "hostA")
    assert data_dir == tmp_path / "data" / prefix
    names = sorted(p.name for p in data_dir.iterdir())
    assert names == sorted(
        ["stats.json", "log.csv", f"{prefix}_xdata.csv", f"{prefix}_ydata.csv"]
    )