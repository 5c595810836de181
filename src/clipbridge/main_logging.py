"""Logging setup shared by the clipbridge server and client modes."""
import logging

LOG_FORMAT = "%(levelname)s: %(message)s"

# Third-party loggers that report every request at INFO.
CHATTY_LOGGERS = ("httpx", "httpcore")


def configure_logging(verbose: bool) -> None:
    """Send clipbridge log records to stderr at the chosen verbosity.

    Args:
        verbose: DEBUG for clipbridge and the HTTP libraries when True;
            WARNING otherwise, which still reports failed pushes and pulls.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[logging.StreamHandler()])
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(level)
