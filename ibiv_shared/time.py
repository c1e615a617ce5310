"""
Timing helper for slow media operations.
"""
from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager


@contextmanager
def timer(label: str, logger: logging.Logger) -> Iterator[None]:
    """
    Log the wall time spent inside the block at debug level.

    Usage:
        with timer(f"thumbnail {entry.filename}", logger):
            ...
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        logger.debug("%s finished in %.1fms", label, (time.perf_counter() - start) * 1000.0)
