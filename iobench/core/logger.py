"""Console and file logging for iobench runs."""
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)

LOG_DIR = Path("/var/log/iobench")
LOG_FILE = LOG_DIR / "iobench.log"
FALLBACK_LOG_FILE = Path("/tmp/iobench.log")

_file_logging_configured = False


def setup_file_logging(log_file: str = None, verbose: bool = False):
    """Attach a file handler to the ``iobench`` logger.

    Raw dd/fio output is logged at DEBUG, so ``verbose`` is what keeps it
    in the file.

    Args:
        log_file: Path to log file (defaults to /var/log/iobench/iobench.log)
        verbose: Enable debug-level logging

    Note:
        Falls back to /tmp/iobench.log if the log directory is not writable.
    """
    global _file_logging_configured

    if _file_logging_configured:
        return

    target_log_file = Path(log_file) if log_file else LOG_FILE

    try:
        target_log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(target_log_file)
    except PermissionError:
        target_log_file = FALLBACK_LOG_FILE
        file_handler = logging.FileHandler(target_log_file)

    root_logger = logging.getLogger("iobench")
    file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)

    file_formatter = logging.Formatter(
        "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_formatter)
    root_logger.addHandler(file_handler)
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    _file_logging_configured = True

    root_logger.info(f"iobench logging initialized: {target_log_file}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger with Rich console output.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger with Rich console handler

    Note:
        File logging must be enabled separately via setup_file_logging()
    """
    logger = logging.getLogger(name)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler.setLevel(logging.INFO)
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)

    return logger
