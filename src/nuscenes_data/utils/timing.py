import logging
import time
from contextlib import contextmanager
from typing import Iterator


@contextmanager
def time_block(logger: logging.Logger, label: str, level: int = logging.DEBUG) -> Iterator[float]:
    start = time.perf_counter()
    yield start
    end = time.perf_counter()
    logger.log(level, f"{label} took {end - start:.3f}s")
