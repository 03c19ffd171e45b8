# log_service.py
import logging


def level_from_name(name: str, default: int = logging.INFO) -> int:
    """Translate 'DEBUG' / 'info' / ... into a logging level, falling back to default."""
    level = logging.getLevelName((name or "").strip().upper())
    return level if isinstance(level, int) else default


def configure_logger(log_level: int = logging.INFO) -> None:
    """Console logging for the app.

    The console only wants a quick overview, so the format drops date and time.
    httpx logs every request at INFO, which is too chatty next to our own lines.
    """
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter("%(levelname)-8s %(name)s: %(message)s"))

    logging.basicConfig(level=log_level, handlers=[stream_handler], force=True)
    logging.getLogger("httpx").setLevel(logging.WARNING)
