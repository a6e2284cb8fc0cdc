"""Filesystem tools: hex-to-image conversion, a split-file relic store and transforming views."""

__version__ = "0.1.0"