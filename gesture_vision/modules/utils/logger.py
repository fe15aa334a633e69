"""
Logging bootstrap and timing helpers.

Capture cycles run on pool threads, so both formats carry the thread name;
``capture-worker_N`` lines belong to a session cycle, everything else to a
control call.
"""

import os
import logging
import logging.handlers
import time
from functools import wraps

CONSOLE_FORMAT = "%(asctime)s  %(levelname)-5s  [%(threadName)s] %(name)s  %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)-7s] %(threadName)-18s %(name)-45s | %(message)s"
DATE_FORMAT = "%H:%M:%S"


def _level(name, default=logging.INFO):
    return getattr(logging, str(name).upper(), default)


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3,
                  module_levels=None):
    """Configure console (and optional rotating file) logging for the service.

    Args:
        level: root and console level
        log_file: rotating DEBUG log path; console only when empty
        module_levels: per-logger overrides, e.g.
            ``{"gesture_vision.core.pipeline": "DEBUG"}``
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if log_file else _level(level))
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(_level(level))
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    for name, module_level in (module_levels or {}).items():
        logging.getLogger(name).setLevel(_level(module_level))

    return root_logger


def log_timing(func=None, *, slow_ms=None):
    """Decorator logging a call's duration at DEBUG.

    With ``slow_ms`` a call that takes longer is logged at WARNING instead,
    so an overrunning capture cycle shows up without DEBUG enabled.

        @log_timing
        @log_timing(slow_ms=150)
    """
    if func is None:
        return lambda f: log_timing(f, slow_ms=slow_ms)

    logger = logging.getLogger(func.__module__)

    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = (time.perf_counter() - start) * 1000
        if slow_ms is not None and elapsed > slow_ms:
            logger.warning("%s took %.2fms (budget %.0fms)", func.__name__, elapsed, slow_ms)
        else:
            logger.debug("%s took %.2fms", func.__name__, elapsed)
        return result

    return wrapper
