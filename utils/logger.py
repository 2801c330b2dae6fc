import logging
import sys

DEFAULT_LOGGER_NAME = "genxmldsig"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name=DEFAULT_LOGGER_NAME, level=logging.INFO):
    """
    Return the project logger, attaching a stderr handler the first time.

    Output goes to stderr so that a signed document written to stdout is never
    interleaved with log lines.
    """
    log = logging.getLogger(name)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
        log.setLevel(level)
        log.propagate = False
    return log


def set_verbosity(verbose: bool):
    get_logger().setLevel(logging.DEBUG if verbose else logging.INFO)
