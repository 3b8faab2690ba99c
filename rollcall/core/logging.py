# rollcall/core/logging.py
import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single console handler on the rollcall logger tree."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger("rollcall")
    # Clear existing handlers to avoid duplicates on app re-creation
    root.handlers.clear()
    root.setLevel(log_level)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(log_level)
    root.addHandler(handler)
