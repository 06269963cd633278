"""
Base Service Class.

Minimal base class standardizing the logger pattern for all services,
plus the payload helpers they share for the backend's list responses.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Hashable, Iterable, TypeVar

from pydantic import BaseModel, ValidationError

from portal.api_client import ApiError
from portal.logger import StructuredLogger
from portal.models.results import FormErrors, OperationResult
from portal.utils.string_helpers import JsonValue

K = TypeVar("K", bound=Hashable)
M = TypeVar("M", bound=BaseModel)
R = TypeVar("R")

# Paged or wrapped list responses put the records under one of these.
_ENVELOPE_KEYS: tuple[str, ...] = ("content", "data")


def unwrap_collection(payload: JsonValue) -> list[dict[str, JsonValue]]:
    """Return the records of a list response.

    Accepts a bare JSON array or an object wrapping one under ``content``
    or ``data``; anything else yields an empty list.
    """
    if isinstance(payload, dict):
        for key in _ENVELOPE_KEYS:
            inner = payload.get(key)
            if isinstance(inner, list):
                payload = inner
                break
    if not isinstance(payload, list):
        return []
    return [item for item in payload if isinstance(item, dict)]


def run_concurrently(
    keys: Iterable[K],
    call: Callable[[K], R],
    max_workers: int,
) -> tuple[dict[K, R], dict[K, Exception]]:
    """Run ``call(key)`` for every key on a thread pool and wait for all.

    Returns ``(results, errors)`` keyed by input; a failing call never
    prevents the others from settling.
    """
    keys = list(keys)
    results: dict[K, R] = {}
    errors: dict[K, Exception] = {}
    if not keys:
        return results, errors

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(keys)))) as executor:
        future_to_key: dict[Future[R], K] = {
            executor.submit(call, key): key for key in keys
        }
        for future in as_completed(future_to_key):
            key = future_to_key[future]
            try:
                results[key] = future.result()
            except Exception as exc:
                errors[key] = exc
    return results, errors


class BaseService:
    """Base class for all service classes. Provides a logger."""

    def __init__(self, logger: StructuredLogger) -> None:
        self._logger: StructuredLogger = logger

    def _failure(self, exc: ApiError, default: str, event: str) -> OperationResult:
        """Log a failed backend call and describe it for the user."""
        self._logger.warning("%s: %s", default, exc, extra={"event": event})
        return OperationResult(success=False, message=exc.user_message(default))

    def _parse_records(
        self, model: type[M], payload: JsonValue,
    ) -> list[M]:
        """Validate each record of a list response, skipping unusable ones."""
        records: list[M] = []
        for raw in unwrap_collection(payload):
            try:
                records.append(model.model_validate(raw))
            except ValidationError as exc:
                self._logger.warning(
                    "Skipping malformed %s record: %s", model.__name__, exc,
                )
        return records


def invalid_form(errors: FormErrors) -> OperationResult:
    """Wrap client-side validation failures as an operation result."""
    return OperationResult(
        success=False,
        message=errors.first_message() or "Please correct the highlighted fields",
        field_errors=dict(errors.errors),
    )
