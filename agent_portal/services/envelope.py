from __future__ import annotations

from typing import Any, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from agent_portal.services.exceptions import DownstreamServiceError, NotFoundError, ServiceError

ModelT = TypeVar("ModelT", bound=BaseModel)


def unwrap(body: Any, *, action: str) -> Any:
    """Return the payload of a ``{success, message, data}`` envelope.

    Bodies that are not envelopes (bare lists or records) are returned as-is.
    A refusal whose message reports a missing record raises
    :class:`NotFoundError`.
    """

    if isinstance(body, dict) and "success" in body:
        if not body.get("success"):
            message = body.get("message")
            if isinstance(message, str) and "not found" in message.lower():
                raise NotFoundError(message)
            raise DownstreamServiceError(
                f"{action} failed" + (f": {message}" if message else ""),
                backend_message=message,
            )
        return body.get("data")
    return body


def missing_record(exc: DownstreamServiceError, default: str) -> NotFoundError | None:
    """Return a :class:`NotFoundError` for a backend 404, else ``None``."""

    if exc.status_code == 404:
        return NotFoundError(describe(exc, default), cause=exc)
    return None


def parse_record(model: Type[ModelT], record: Any, *, action: str) -> ModelT:
    try:
        return model.model_validate(record)
    except ValidationError as exc:
        raise DownstreamServiceError(
            f"{action} returned a malformed response", cause=exc
        ) from exc


def parse_records(model: Type[ModelT], records: Any, *, action: str) -> List[ModelT]:
    if records is None:
        return []
    if not isinstance(records, list):
        raise DownstreamServiceError(f"{action} returned a malformed response")
    return [parse_record(model, record, action=action) for record in records]


def describe(exc: ServiceError, default: str) -> str:
    """Best-effort user-facing message for a service failure."""

    backend_message = getattr(exc, "backend_message", None)
    if backend_message:
        return backend_message
    return str(exc) or default
