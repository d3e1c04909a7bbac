"""ICMP echo probing with MLS-modulated payload sizes, RTT recording, and a pure-Python AES."""

__version__ = "0.1.0"
__all__ = ["aes", "icmp", "mls", "prober", "report", "sequence"]