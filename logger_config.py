"""
Logging configuration for the SQS client.

Every module gets its logger from get_logger() so output is written to
stdout in one consistent format.
"""
import logging
import os
import sys


DEFAULT_LOGGER_NAME = 'sqs_client'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (defaults to the client's logger if not provided)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name or DEFAULT_LOGGER_NAME)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    log_level = os.environ.get('LOG_LEVEL', 'INFO').upper()
    logger.setLevel(getattr(logging, log_level, logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logger.level)
    handler.setFormatter(
        logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
    )
    logger.addHandler(handler)

    # Library output should not be duplicated by an application's root handler
    logger.propagate = False

    return logger
