"""Shared type aliases for Saturator."""

from __future__ import annotations

# HTTP headers dictionary.
Headers = dict[str, str]

# Single header as parsed from the command line.
HeaderPair = tuple[str, str]
