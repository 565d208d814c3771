# app/timing.py
from time import perf_counter
from contextlib import contextmanager
from .logging_utils import setup_logger, log_kv

EXPORT_LOGGER = "export"

@contextmanager
def timed_block(stage: str, logger_name: str = EXPORT_LOGGER, **extra):
    """
    Context manager for ad-hoc blocks, logs start/end + elapsed_ms
    to <LOG_DIR>/<logger_name>.log:
        with timed_block("parse-ranking-info", results=500):
            ... do work ...
    Extra keyword pairs are appended to the start line.
    """
    log = setup_logger(logger_name)
    log_kv(log, event="start", stage=stage, **extra)
    start = perf_counter()
    try:
        yield
    finally:
        elapsed_ms = int((perf_counter() - start) * 1000)
        log_kv(log, event="end", stage=stage, elapsed_ms=elapsed_ms)
