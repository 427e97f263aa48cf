"""Logging helpers that keep bank account numbers out of log output."""
from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from .config import log_level

LOGGER_NAME = "meza_payroll"

# Account numbers and other long identifiers: keep the last four digits.
ACCOUNT_PATTERN = re.compile(r"\b(\d[\d\- ]{2,})(\d{4})\b")


class RedactingFilter(logging.Filter):
    """Mask digit runs that look like account numbers."""

    mask = "****"

    def _mask_accounts(self, value: object) -> object:
        if not isinstance(value, str):
            return value
        return ACCOUNT_PATTERN.sub(lambda m: self.mask + m.group(2), value)

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self._mask_accounts(record.msg)
        if record.args:
            if isinstance(record.args, dict):
                record.args = {key: self._mask_accounts(value) for key, value in record.args.items()}
            else:
                record.args = tuple(self._mask_accounts(arg) for arg in record.args)
        return True


def install_redacting_filter(target_loggers: Optional[Iterable[str]] = None) -> None:
    for name in target_loggers or (LOGGER_NAME,):
        target = logging.getLogger(name)
        if not any(isinstance(flt, RedactingFilter) for flt in target.filters):
            target.addFilter(RedactingFilter())


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel((level or log_level()).upper())
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        handler.addFilter(RedactingFilter())
        logger.addHandler(handler)
    install_redacting_filter([LOGGER_NAME, "uvicorn.error", "uvicorn.access"])
    return logger
