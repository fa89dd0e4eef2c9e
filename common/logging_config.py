"""Logging setup shared by the upload server and the client."""

import logging
import os
import re
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

PACKAGE_LOGGERS = ('common', 'server', 'client')

MASK = '***MASKED***'

_SECRET_PATTERNS = [
    re.compile(r'(password[_-]?hash["\']?\s*[:=]\s*["\']?)([^"\'}\s,&]+)', re.IGNORECASE),
    re.compile(r'(password["\']?\s*[:=]\s*["\']?)([^"\'}\s,&]+)', re.IGNORECASE),
    re.compile(r'([?&]pwd=)([^&\s]+)', re.IGNORECASE),
    re.compile(r'(authorization["\']?\s*[:=]\s*["\']?(?:token|bearer)?\s*)([^"\'}\s,]+)', re.IGNORECASE),
    re.compile(r'(\btoken["\']?\s*[:=]\s*["\']?)([^"\'}\s,]+)', re.IGNORECASE),
    re.compile(r'\b(gh[pousr]_)([A-Za-z0-9]{16,})'),
]


def mask_secrets(text: str) -> str:
    """Replace GitHub tokens, passwords and password hashes in ``text``."""
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(lambda m: m.group(1) + MASK, text)
    return text


class SensitiveDataFilter(logging.Filter):
    """Masks secrets in the message and in string arguments of every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = mask_secrets(record.msg)

        args = record.args
        if isinstance(args, dict):
            record.args = {key: _masked(value) for key, value in args.items()}
        elif isinstance(args, tuple):
            record.args = tuple(_masked(value) for value in args)
        return True


def _masked(value):
    return mask_secrets(value) if isinstance(value, str) else value


def setup_logging(
    component_name: str,
    log_level: Optional[str] = None,
) -> logging.Logger:
    """
    Configure console logging for a component and the project packages.

    Module loggers from ``get_logger(__name__)`` live under the ``common``,
    ``server`` and ``client`` packages; they get the same stdout handler as
    the component logger. Calling this again for an already configured
    component only adjusts its level.

    Args:
        component_name: Name of the component (e.g., 'server', 'client')
        log_level: Level name; defaults to the LOG_LEVEL env var, then INFO

    Returns:
        The component logger
    """
    level_name = (log_level or os.getenv('LOG_LEVEL') or 'INFO').upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    component_logger = logging.getLogger(component_name)
    component_logger.setLevel(level)
    if component_logger.handlers:
        return component_logger

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    console.addFilter(SensitiveDataFilter())

    for name in {component_name, *PACKAGE_LOGGERS}:
        package_logger = logging.getLogger(name)
        package_logger.setLevel(level)
        package_logger.propagate = False
        if not package_logger.handlers:
            package_logger.addHandler(console)

    return component_logger


def get_logger(name: str) -> logging.Logger:
    """Module logger; configured by ``setup_logging`` through its package."""
    return logging.getLogger(name)
