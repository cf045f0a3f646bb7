"""Decorators for standardizing admin form error handling."""

import functools
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from .errors import (
    CreationError,
    PermissionDeniedError,
    SupportAgentNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _error_response(code: str, message: str) -> dict[str, Any]:
    return {"success": False, "data": {"code": code, "message": message}}


def handle_admin_errors(func: F) -> F:
    """Turn admin form handler failures into JSON-style error envelopes.

    Handlers return the payload of a successful response; the wrapper
    produces {"success": True, "data": payload}. Known boundary errors
    become {"success": False, "data": {"code": ..., "message": ...}}.
    Anything else is logged and re-raised.

    Example:
        @handle_admin_errors
        def handle_delete(self, data: dict[str, Any]) -> dict[str, Any]:
            self.manager.delete_support_agent(int(data["id"]))
            return {"deleted": True}
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> dict[str, Any]:
        handler_name = func.__name__
        try:
            payload = func(*args, **kwargs)
        except PermissionDeniedError as e:
            logger.warning(f"Admin handler {handler_name} denied: {e}")
            return _error_response(e.code, str(e))
        except ValidationError as e:
            logger.info(f"Admin handler {handler_name} rejected input: {e}")
            return _error_response(e.code, str(e))
        except CreationError as e:
            logger.error(f"Admin handler {handler_name} creation failed: {e}")
            return _error_response(e.code, str(e))
        except SupportAgentNotFoundError as e:
            logger.info(f"Admin handler {handler_name}: {e}")
            return _error_response(e.code, str(e))
        except Exception as e:
            logger.exception(f"Admin handler {handler_name} unexpected error: {e}")
            raise
        return {"success": True, "data": payload if payload is not None else {}}

    return wrapper  # type: ignore[return-value]
