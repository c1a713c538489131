"""Scavenger hunt backend: signed QR code tokens and exactly-once group scoring."""

__version__ = "0.1.0"
