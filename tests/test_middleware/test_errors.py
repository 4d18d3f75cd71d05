"""Tests for error handling middleware."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastmcp.exceptions import ToolError

from fleet_mcp.errors import ResolutionError
from fleet_mcp.middleware.errors import ErrorHandlingMiddleware, error_kind


@pytest.fixture
def mock_context() -> MagicMock:
    """Create a mock middleware context."""
    context = MagicMock()
    context.method = "tools/call"
    context.message = MagicMock()
    context.message.name = "perform_command"
    return context


@pytest.mark.asyncio
async def test_passes_through_success(mock_context: MagicMock) -> None:
    middleware = ErrorHandlingMiddleware()
    call_next = AsyncMock(return_value="success")

    assert await middleware.on_message(mock_context, call_next) == "success"


@pytest.mark.asyncio
async def test_request_errors_logged_as_warning(mock_context: MagicMock) -> None:
    """ToolErrors come from bad requests and are not server errors."""
    mock_logger = MagicMock()
    middleware = ErrorHandlingMiddleware(logger=mock_logger)
    call_next = AsyncMock(side_effect=ToolError("no matching hosts for: ghost"))

    with pytest.raises(ToolError):
        await middleware.on_message(mock_context, call_next)

    mock_logger.warning.assert_called_once()
    mock_logger.error.assert_not_called()


@pytest.mark.asyncio
async def test_unexpected_errors_logged_with_traceback(mock_context: MagicMock) -> None:
    mock_logger = MagicMock()
    middleware = ErrorHandlingMiddleware(logger=mock_logger, include_traceback=True)
    call_next = AsyncMock(side_effect=RuntimeError("boom"))

    with pytest.raises(RuntimeError):
        await middleware.on_message(mock_context, call_next)

    mock_logger.error.assert_called_once()
    assert "RuntimeError" in str(mock_logger.error.call_args)


@pytest.mark.asyncio
async def test_tracks_error_stats(mock_context: MagicMock) -> None:
    middleware = ErrorHandlingMiddleware(logger=MagicMock())

    for error in (ValueError("a"), ValueError("b"), ToolError("c")):
        with pytest.raises(Exception):
            await middleware.on_message(mock_context, AsyncMock(side_effect=error))

    assert middleware.get_error_stats() == {"ValueError": 2, "ToolError": 1}

    middleware.reset_stats()
    assert middleware.get_error_stats() == {}


@pytest.mark.asyncio
async def test_calls_error_callback(mock_context: MagicMock) -> None:
    callback = MagicMock()
    middleware = ErrorHandlingMiddleware(logger=MagicMock(), error_callback=callback)
    error = ValueError("bad input")

    with pytest.raises(ValueError):
        await middleware.on_message(mock_context, AsyncMock(side_effect=error))

    callback.assert_called_once_with(error, mock_context)


@pytest.mark.asyncio
async def test_failing_callback_does_not_mask_error(mock_context: MagicMock) -> None:
    mock_logger = MagicMock()
    middleware = ErrorHandlingMiddleware(
        logger=mock_logger, error_callback=MagicMock(side_effect=RuntimeError("cb"))
    )

    with pytest.raises(ValueError):
        await middleware.on_message(mock_context, AsyncMock(side_effect=ValueError("x")))

    assert "Error callback failed" in str(mock_logger.warning.call_args)


@pytest.mark.asyncio
async def test_counts_wrapped_fleet_errors_by_cause(mock_context: MagicMock) -> None:
    """A ToolError raised from a fleet error is counted under the fleet error."""
    mock_logger = MagicMock()
    middleware = ErrorHandlingMiddleware(logger=mock_logger)
    try:
        raise ResolutionError("no matching hosts for: ghost", unresolved=["ghost"])
    except ResolutionError as e:
        wrapped = ToolError(str(e))
        wrapped.__cause__ = e

    with pytest.raises(ToolError):
        await middleware.on_message(mock_context, AsyncMock(side_effect=wrapped))

    assert middleware.get_error_stats() == {"ResolutionError": 1}
    assert "ResolutionError" in str(mock_logger.warning.call_args)


def test_error_kind() -> None:
    assert error_kind(ValueError("x")) == "ValueError"
    assert error_kind(ToolError("x")) == "ToolError"
