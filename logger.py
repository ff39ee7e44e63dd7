"""Structured logging for the interview task store."""

import logging
import sys
from pythonjsonlogger import jsonlogger
from config import config

LOGGER_NAME = 'interview_tasks'

# Attributes of logging.LogRecord that ``extra`` may not overwrite
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'asctime'}


class StoreJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter tagging each record with the component and storage backend."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['app'] = 'interview-tasks'
        log_record['environment'] = 'development' if config.debug else 'production'
        log_record['backend'] = config.storage_backend
        log_record['component'] = record.module


def setup_logging(level: int = None, stream=None) -> logging.Logger:
    """Configure JSON logging on the package logger. Calling it again replaces the handler."""
    if level is None:
        level = logging.DEBUG if config.debug else logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers = []
    logger.propagate = False

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(StoreJsonFormatter(
        '%(levelname)s %(name)s %(message)s %(lineno)d',
        rename_fields={'levelname': 'severity'},
        timestamp='@timestamp',
    ))
    logger.addHandler(handler)

    return logger


logger = setup_logging()


def _context(kwargs: dict) -> dict:
    """Context fields, renamed with a ``ctx_`` prefix where they clash with LogRecord."""
    return {(f'ctx_{k}' if k in _RESERVED_ATTRS else k): v for k, v in kwargs.items()}


def log_info(message: str, **kwargs):
    logger.info(message, extra=_context(kwargs), stacklevel=2)


def log_error(message: str, **kwargs):
    """Log an error; the active exception, if any, is attached."""
    logger.error(message, extra=_context(kwargs), exc_info=sys.exc_info()[0] is not None, stacklevel=2)


def log_warning(message: str, **kwargs):
    logger.warning(message, extra=_context(kwargs), stacklevel=2)


def log_debug(message: str, **kwargs):
    logger.debug(message, extra=_context(kwargs), stacklevel=2)
