"""Shared kernel: small helpers used across modules.

Keep this small: business rules live in modules/rules_pkg. This is for
cross-cutting plumbing only (session handling, merging, response shapes).
"""
import functools
from typing import Any, Callable, Dict, Optional

from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError as PydanticValidationError

from .modules.rules_pkg.errors import ValidationError


def safe_update(target: Dict[str, Any], diff: Dict[str, Any]) -> Dict[str, Any]:
    """
    Performs a safe, non-destructive dictionary update.

    Returns a new dictionary containing the merged result of `target` and `diff`,
    without modifying the original `target` dictionary. Nested dictionaries
    (stats, skills, slots) are merged key by key; lists and scalars in `diff`
    replace the stored value.

    Args:
        target (Dict): The base dictionary.
        diff (Dict): The updates to apply.

    Returns:
        Dict: The new merged dictionary.
    """
    result = dict(target)
    for key, value in diff.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = safe_update(result[key], value)
        else:
            result[key] = value
    return result


def with_db_session(session_factory):
    """
    Decorator to inject a database session into a function.

    If 'db' is already present in kwargs, it is used.
    Otherwise, a new session is created from session_factory and closed after execution.
    """
    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if "db" in kwargs and kwargs["db"] is not None:
                return func(*args, **kwargs)

            db = session_factory()
            try:
                kwargs["db"] = db
                return func(*args, **kwargs)
            finally:
                db.close()
        return wrapper
    return decorator


def field_errors(errors) -> list:
    """Flattens pydantic/FastAPI error dicts into ``[{"field", "message"}]``."""
    flattened = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        flattened.append({"field": ".".join(loc) or "__root__", "message": err.get("msg", "")})
    return flattened


def validation_error_from_pydantic(exc: PydanticValidationError) -> ValidationError:
    return ValidationError(field_errors(exc.errors()))


def envelope(data: Any = None, message: Optional[str] = None, count: Optional[int] = None) -> Dict[str, Any]:
    """Standard success response: ``{"success": true, "data": ..., "count"?, "message"?}``."""
    body: Dict[str, Any] = {"success": True}
    if count is not None:
        body["count"] = count
    if data is not None:
        body["data"] = jsonable_encoder(data)
    if message:
        body["message"] = message
    return body
