# ctxpacker/utils/logger.py

import logging
import os
import sys
from pathlib import Path
from platformdirs import user_log_dir

from ctxpacker.config import APP_NAME, APP_AUTHOR

DEBUG_ENV_VAR = "CTXPACKER_DEBUG"


def setup_logger():
    logger = logging.getLogger(APP_NAME)

    # Default: silence everything unless CTXPACKER_DEBUG=1 is set
    if not os.environ.get(DEBUG_ENV_VAR):
        logger.setLevel(logging.CRITICAL)
        if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
            logger.addHandler(logging.NullHandler())
        logger.propagate = False
        return logger

    # Debug mode: write to user logs
    logger.setLevel(logging.DEBUG)
    if not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        log_dir = Path(user_log_dir(appname=APP_NAME, appauthor=APP_AUTHOR))
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / "app.debug.log"
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
        logger.addHandler(fh)
    logger.propagate = False
    return logger


def enable_console_logging(level: int = logging.INFO) -> None:
    """Mirror log records to stderr (used by the CLI's -v flag)."""
    if any(getattr(h, "_ctxpacker_console", False) for h in logger.handlers):
        return
    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(level)
    sh.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    sh._ctxpacker_console = True
    logger.addHandler(sh)
    if logger.level > level:
        logger.setLevel(level)


logger = setup_logger()
