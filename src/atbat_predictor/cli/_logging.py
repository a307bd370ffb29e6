import logging
import sys

_QUIET_LOGGERS = ("httpx", "httpcore")

# Thread name separates sync-loop records from CLI records.
_FORMAT = "%(asctime)s %(levelname)-8s [%(threadName)s] %(name)s: %(message)s"


def configure_logging(*, verbose: bool = False) -> None:
    """Send log records to stderr, at DEBUG with ``--verbose`` and INFO otherwise."""
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
    root.addHandler(handler)

    # HTTP client chatter only shows up when debugging.
    quiet_level = logging.NOTSET if verbose else logging.WARNING
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)
