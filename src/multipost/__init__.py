"""
Package: multipost
Description: POST one payload to many URLs concurrently, with retries.

The delivery package holds the per-target retrying worker and the
fan-out coordinator; cli wires them to flags, input and exit codes.
"""

__version__ = "0.1.0"
