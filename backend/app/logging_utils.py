# app/logging_utils.py
import os
import sys
import logging
from pathlib import Path

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

_PLAIN_FMT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_JSON_FMT = '{"t":"%(asctime)s","lv":"%(levelname)s","lg":"%(name)s","msg":"%(message)s"}'


def _formatter() -> logging.Formatter:
    log_format = os.getenv("LOG_FORMAT", "plain").lower()
    return logging.Formatter(_JSON_FMT if log_format == "json" else _PLAIN_FMT)


def setup_logger(name: str) -> logging.Logger:
    """
    Create or return a logger that writes to <LOG_DIR>/<name>.log using env settings:
      LOG_DIR (default 'logs'), LOG_LEVEL (default 'INFO'), LOG_FORMAT ('plain' or 'json'),
      LOG_CONSOLE ('1' also mirrors lines to stderr, handy for the CLI tools)
    """
    log_dir = os.getenv("LOG_DIR", "logs")
    log_level = _LEVELS.get(os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)

    Path(log_dir).mkdir(parents=True, exist_ok=True)
    logfile = str(Path(log_dir) / f"{name}.log")

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    logger.propagate = False  # avoid duplicate lines from root

    # One handler per target; repeated calls (every export run) reuse it
    if not any(getattr(h, "_app_target", None) == logfile for h in logger.handlers):
        fh = logging.FileHandler(logfile, encoding="utf-8")
        fh._app_target = logfile
        fh.setFormatter(_formatter())
        fh.setLevel(log_level)
        logger.addHandler(fh)

    if os.getenv("LOG_CONSOLE") == "1" and not any(getattr(h, "_app_target", None) == "stderr" for h in logger.handlers):
        sh = logging.StreamHandler(sys.stderr)
        sh._app_target = "stderr"
        sh.setFormatter(_formatter())
        sh.setLevel(log_level)
        logger.addHandler(sh)

    return logger


def log_kv(logger: logging.Logger, level: int = logging.INFO, **kv):
    """
    Convenience: logs a single line with key=val pairs.
    Example: log_kv(log, event="fetched", requested=500, received=500)
    """
    parts = [f"{k}={v}" for k, v in kv.items()]
    logger.log(level, " ".join(parts))
