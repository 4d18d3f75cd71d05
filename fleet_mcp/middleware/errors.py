"""Error handling middleware that counts request failures by fleet error type."""

import logging
import traceback
from collections import Counter
from collections.abc import Callable
from typing import Any

from fastmcp.exceptions import ToolError
from fastmcp.server.middleware import MiddlewareContext

from fleet_mcp.middleware.base import FleetMiddleware

ErrorCallback = Callable[[Exception, MiddlewareContext], None]


def error_kind(exc: BaseException) -> str:
    """Name the error a request failed with.

    Tools wrap ResolutionError, PersistenceError, SummarizerError and bad
    input in a ToolError; the wrapped error names the failure.
    """
    if isinstance(exc, ToolError) and exc.__cause__ is not None:
        return type(exc.__cause__).__name__
    return type(exc).__name__


class ErrorHandlingMiddleware(FleetMiddleware):
    """Logs and counts every error that aborts a request, then re-raises it.

    A ToolError means the request could not be served as asked (unknown
    hosts, malformed connection string, no summarizer) and is logged at
    WARNING. Anything else escaped a handler and is logged at ERROR.
    Per-host failures never reach this layer; they are part of the result.
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        include_traceback: bool = False,
        error_callback: ErrorCallback | None = None,
    ) -> None:
        """Initialize error handling middleware.

        Args:
            logger: Optional custom logger.
            include_traceback: Log the traceback of unexpected errors.
            error_callback: Called with (exception, context) for each error.
        """
        super().__init__(logger=logger)
        self.include_traceback = include_traceback
        self.error_callback = error_callback
        self._error_counts: Counter[str] = Counter()

    def get_error_stats(self) -> dict[str, int]:
        """Error counts keyed by error kind (see ``error_kind``)."""
        return dict(self._error_counts)

    def reset_stats(self) -> None:
        self._error_counts.clear()

    async def on_message(
        self,
        context: MiddlewareContext,
        call_next: Any,
    ) -> Any:
        try:
            return await call_next(context)
        except Exception as e:
            kind = error_kind(e)
            self._error_counts[kind] += 1
            self._log(context.method, kind, e)

            if self.error_callback:
                try:
                    self.error_callback(e, context)
                except Exception as callback_error:
                    self.logger.warning("Error callback failed: %s", callback_error)
            raise

    def _log(self, method: str | None, kind: str, exc: Exception) -> None:
        if isinstance(exc, ToolError):
            self.logger.warning("Request rejected in %s (%s): %s", method, kind, exc)
        elif self.include_traceback:
            self.logger.error(
                "Unexpected %s in %s: %s\n%s", kind, method, exc, traceback.format_exc()
            )
        else:
            self.logger.error("Unexpected %s in %s: %s", kind, method, exc)
