# src/ttpgen/logging_setup.py
import logging
import sys

LOGGER_NAME = "ttpgen"
LOG_FORMAT = "[%(asctime)s][%(levelname)s] %(message)s"
DATE_FORMAT = "%H:%M:%S"


def init_logger(log_file: str, enabled: bool, level: int = logging.INFO) -> logging.Logger:
    """
    Send the package's log records to stdout and append them to `log_file`.
    When disabled, records are dropped. Schedules are logged at INFO; DEBUG
    adds every round of every construction.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    if not enabled:
        logger.addHandler(logging.NullHandler())
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in (logging.StreamHandler(sys.stdout), logging.FileHandler(log_file, mode="a")):
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
