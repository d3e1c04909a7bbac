"""Send a payload-modulated train of ICMP echo requests and time the replies."""

from __future__ import annotations

import argparse
import ipaddress
import os
import select
import socket
import sys
import threading
import time
from pathlib import Path

from mlsping.icmp import (
    ICMP_ECHO_REPLY,
    ICMP_ECHO_REQUEST,
    ICMP_HEADER_SIZE,
    IP_MIN_HEADER_SIZE,
    MAX_PAYLOAD_SIZE,
    MIN_PAYLOAD_SIZE,
    build_echo_request,
    parse_packet,
)
from mlsping.report import (
    PingRecord,
    RunSummary,
    current_time_string,
    next_experiment_sequence,
    write_results,
)
from mlsping.sequence import SequenceError, generate_sequence

IDLE_TIMEOUT = 3.0
LISTEN_POLL = 100e-6
RECV_BUFFER = MAX_PAYLOAD_SIZE + IP_MIN_HEADER_SIZE + ICMP_HEADER_SIZE
COUNTER_PATH = Path("setup") / "sequence_counter.txt"


def spin_wait(last_time: float, target_us: float) -> None:
    """Busy-wait until ``target_us`` microseconds have passed since ``last_time``."""
    while (time.monotonic() - last_time) * 1e6 < target_us:
        pass


class Prober:
    """One probing run against one destination."""

    def __init__(self, destination, sequence, frequency, active, sock=None) -> None:
        if frequency <= 0:
            raise ValueError("frequency must be positive")
        self.destination = str(ipaddress.IPv4Address(destination))
        self.sequence = [int(bit) for bit in sequence]
        self.frequency = frequency
        self.active = bool(active)
        self.ident = os.getpid() & 0xFFFF
        self.records = [PingRecord() for _ in self.sequence]
        self.idle_timeout = IDLE_TIMEOUT
        self.running = True
        self.start_time: float | None = None
        self.end_time: float | None = None
        self.sending_start_time: str | None = None
        self._sock = sock
        self._trigger = threading.Event()
        if self.active:
            self._trigger.set()
        self._last_valid = time.monotonic()

    @property
    def triggered(self) -> bool:
        return self._trigger.is_set()

    @property
    def received_count(self) -> int:
        return sum(record.is_received for record in self.records)

    def _timed_out(self, now: float) -> bool:
        return self.triggered and now - self._last_valid >= self.idle_timeout

    def handle_packet(self, data: bytes, received_at: float) -> bool:
        """Account for one received datagram; return whether it was relevant."""
        try:
            packet = parse_packet(data)
        except ValueError:
            return False
        print(f"Received packet from: {packet.source}, Destination: {packet.destination}")
        if packet.source != self.destination:
            print("Packet ignored: source IP does not match target IP.")
            return False
        print(f"Received packet info: id - {packet.ident} pid - {self.ident}")

        if packet.icmp_type == ICMP_ECHO_REQUEST and not self.active and not self.triggered:
            self._last_valid = received_at
            self._trigger.set()
            print("Trigger received from ICMP ECHO REQUEST.")
            return True

        if packet.icmp_type == ICMP_ECHO_REPLY and packet.ident == self.ident:
            if packet.seq < len(self.records) and not self.records[packet.seq].is_received:
                record = self.records[packet.seq]
                self._last_valid = received_at
                record.is_received = True
                record.receive_time = received_at
                record.rtt = (received_at - record.send_time) * 1e6
                print(f"Received packet seq={packet.seq}, RTT={record.rtt:.3f} us")
                return True
        return False

    def _stop(self) -> None:
        print(
            f"No relevant packet received within {self.idle_timeout:g} seconds, "
            "exiting receiver thread..."
        )
        self.running = False

    def receive_loop(self) -> None:
        """Receive replies until no relevant packet arrives for ``idle_timeout`` seconds."""
        print("Receiver thread started")
        self._last_valid = time.monotonic()
        while self.running:
            timeout = self.idle_timeout if self.triggered else LISTEN_POLL
            try:
                ready, _, _ = select.select([self._sock], [], [], timeout)
            except OSError as exc:
                print(f"select failed: {exc}", file=sys.stderr)
                continue
            if not ready:
                if self._timed_out(time.monotonic()):
                    self._stop()
                    break
                if not self.triggered:
                    print("No packet received within 100 microseconds, waiting to trigger...")
                continue
            data = self._sock.recv(RECV_BUFFER)
            if not data:
                continue
            self.handle_packet(data, time.monotonic())
            if self._timed_out(time.monotonic()):
                self._stop()
                break

    def send_all(self) -> None:
        """Send one echo request per sequence bit at the configured rate."""
        interval_us = 1e6 / self.frequency
        self.start_time = last_send = time.monotonic()
        seq = 0
        while seq < len(self.sequence):
            now = time.monotonic()
            record = self.records[seq]
            record.sequence = seq + 1
            record.send_time = now
            record.send_rate = float(self.frequency)
            record.send_interval = (now - last_send) * 1e6 if seq > 0 else 0.0

            payload_size = MAX_PAYLOAD_SIZE if self.sequence[seq] == 1 else MIN_PAYLOAD_SIZE
            packet = build_echo_request(self.ident, seq, payload_size)
            try:
                self._sock.sendto(packet, (self.destination, 0))
            except OSError as exc:
                print(f"Send failed: {exc}", file=sys.stderr)
                continue

            record.payload_size = payload_size
            print(f"sending seq : {seq} payload : {payload_size} icmp length : {len(packet)} ")
            seq += 1
            last_send = now
            spin_wait(last_send, interval_us)
        self.end_time = last_send

    def run(self) -> list[PingRecord]:
        """Wait for the trigger if listening, send every probe, then collect replies."""
        owns_socket = self._sock is None
        if owns_socket:
            self._sock = socket.socket(socket.AF_INET, socket.SOCK_RAW, socket.IPPROTO_ICMP)
        try:
            receiver = threading.Thread(target=self.receive_loop, name="receiver", daemon=True)
            receiver.start()
            if not self.active:
                print("Listening for trigger ICMP Echo Request...")
                self._trigger.wait()
                print("Trigger received, starting ICMP Echo Requests...")
            self.sending_start_time = current_time_string()
            self.send_all()
            print("Waiting for remaining responses...")
            receiver.join()
        finally:
            if owns_socket:
                self._sock.close()
                self._sock = None
        return self.records


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}") from None
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {text!r}")
    return value


def _ipv4(text: str) -> str:
    try:
        return str(ipaddress.IPv4Address(text))
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an IPv4 address: {text!r}") from None


def parse_args(argv=None) -> argparse.Namespace:
    """Parse the command line."""
    parser = argparse.ArgumentParser(
        description="Send ICMP echo requests whose payload sizes follow a 0/1 sequence."
    )
    parser.add_argument("destination", type=_ipv4, help="destination IPv4 address")
    parser.add_argument("packets", type=_positive_int, help="number of packets")
    parser.add_argument("frequency", type=_positive_int, help="sending frequency in Hz")
    parser.add_argument("mode", type=int, help="1 = sequence file, 2 = MLS 'n<bits> s<seed>'")
    parser.add_argument("sequence_source", help="sequence file or MLS specification")
    parser.add_argument("host_label", help="label of this host in result names")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--active", dest="active", action="store_true", help="start at once")
    group.add_argument(
        "--listen", dest="active", action="store_false", help="wait for a trigger echo request"
    )
    parser.set_defaults(active=None)
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Run one probing experiment and write its results."""
    program_start_time = current_time_string()
    args = parse_args(argv)

    try:
        sequence = generate_sequence(args.packets, args.sequence_source, args.mode)
    except SequenceError as exc:
        print(exc, file=sys.stderr)
        return 1

    print("Active mode enabled." if args.active else "Listen mode enabled.")

    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_RAW, socket.IPPROTO_ICMP)
    except OSError as exc:
        print(f"Failed to create raw socket: {exc}", file=sys.stderr)
        return 1

    with sock:
        prober = Prober(args.destination, sequence, args.frequency, args.active, sock)
        records = prober.run()

    total_packets = len(records)
    total_time = prober.end_time - prober.start_time
    print("\nTransmission details:")
    print(f"Start time: {prober.start_time:.6f} s")
    print(f"End time: {prober.end_time:.6f} s")
    print(f"Total time: {total_time:.6f} s")
    print(f"Timer frequency: {args.frequency} Hz")
    if total_time > 0:
        print(f"Average sending rate: {total_packets / total_time:.2f} Hz")
    else:
        print("Error: Invalid total send time")
    received = prober.received_count
    print(
        f"Received {received} out of {total_packets} packets "
        f"({100.0 * received / total_packets:.1f}%)"
    )

    try:
        experiment = next_experiment_sequence(COUNTER_PATH)
    except (OSError, ValueError) as exc:
        print(f"Failed to read sequence number: {exc}", file=sys.stderr)
        return 1

    summary = RunSummary(
        experiment_sequence=experiment,
        total_packets=total_packets,
        signal_source=args.sequence_source,
        signal_source_mode=args.mode,
        host_label=args.host_label,
        timer_frequency=args.frequency,
        start_time=prober.start_time,
        end_time=prober.end_time,
        received_count=received,
        program_start_time=program_start_time,
        sending_start_time=prober.sending_start_time or program_start_time,
    )
    try:
        data_dir = write_results(Path("."), summary, records)
    except (OSError, ValueError) as exc:
        print(f"Failed to write results: {exc}", file=sys.stderr)
        return 1

    print(f"Configuration complete. Data directory: {data_dir}")
    print("end logging...")
    return 0