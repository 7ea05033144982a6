"""
hashwatch - Track the content-hash history of individual files.

hashwatch uses a two-layer architecture:
- History Layer: SHA-256 digests persisted per file as an append-only record
- Watch Layer: a cancellable polling session that keeps the record current
"""

__version__ = "0.1.0"
__author__ = "hashwatch Team"
__description__ = "Track the SHA-256 hash history of files over time"

# Package metadata
__all__ = [
    "__version__",
    "__author__",
    "__description__",
]
