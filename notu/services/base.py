"""
Base Controller.

Base class for the state controllers. Controllers own in-memory view
state, drive the domain client, and are the only layer that turns an
error into a user-visible message.

Usage:
    from notu.services.base import BaseController

    class ThingController(BaseController):
        async def load(self) -> None:
            try:
                self.things = await self.api.list_things()
            except ApplicationError as e:
                self.error = self._error_text(e)
"""

from collections.abc import Callable
from typing import Any

from notu.core.exceptions import ApplicationError, HttpError
from notu.core.i18n import get_translation
from notu.core.logging import get_logger


class BaseController:
    """
    Base class for all controllers.

    Provides:
    - Language-aware string lookup
    - Logging context
    - Error-to-message conversion
    """

    def __init__(self, language: Callable[[], str] | None = None) -> None:
        """
        Args:
            language: Returns the current interface language; read on every
                lookup so a language switch takes effect immediately
        """
        self._language = language or (lambda: "id")
        self._logger = get_logger(self.__class__.__module__)

    def _t(self, key: str, **params: Any) -> str:
        return get_translation(self._language(), key, **params)

    @staticmethod
    def _server_detail(error: ApplicationError) -> str | None:
        """The server-supplied message, when the error carries one."""
        if isinstance(error, HttpError):
            return error.server_message
        return None

    def _error_text(self, error: ApplicationError) -> str:
        return self._server_detail(error) or error.message

    def _log_operation(self, operation: str, **context: Any) -> None:
        """Log a controller operation with context."""
        self._logger.info(
            operation,
            source="sync",
            extra={"controller": self.__class__.__name__, **context},
        )

    def _log_debug(self, message: str, **context: Any) -> None:
        self._logger.debug(
            message,
            source="sync",
            extra={"controller": self.__class__.__name__, **context},
        )

    def _log_failure(self, operation: str, error: ApplicationError, **context: Any) -> None:
        self._logger.warning(
            f"{operation} failed",
            source="sync",
            extra={
                "controller": self.__class__.__name__,
                "error_code": error.code,
                "error": error.message,
                **context,
            },
        )
