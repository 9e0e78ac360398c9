import logging
import sys

from mutualpool.core.config import settings


class AppLogger:
    """Ledger logger; keyword context is appended to the message as key=value pairs."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self._setup_logger()

    def _setup_logger(self):
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ))
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    @staticmethod
    def _format(message: str, context: dict) -> str:
        if not context:
            return message
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{message} [{pairs}]"

    def debug(self, message: str, **kwargs):
        self.logger.debug(self._format(message, kwargs))

    def info(self, message: str, **kwargs):
        self.logger.info(self._format(message, kwargs))

    def warning(self, message: str, **kwargs):
        self.logger.warning(self._format(message, kwargs))

    def error(self, message: str, **kwargs):
        self.logger.error(self._format(message, kwargs))

    def exception(self, message: str, **kwargs):
        self.logger.exception(self._format(message, kwargs))


def get_logger(name: str) -> AppLogger:
    """Get a logger instance."""
    return AppLogger(name)
