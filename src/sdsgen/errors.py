# src/sdsgen/errors.py
from __future__ import annotations

import traceback
from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure kinds used for propagation and RPC error codes.

    Values:
    - CONFIGURATION: No usable credential, or an unsupported platform/complexity value.
    - NETWORK: Transport failure, non-2xx response, or timeout talking to a provider.
    - VALIDATION: A response or request has the wrong shape.
    - PARSING: No JSON value of the expected shape could be extracted from model text.
    - AI_PROVIDER: A provider call failed after the retry budget was exhausted.
    - GENERATION: A pipeline stage (module discovery) failed as a whole.
    - FILE_IO: Writing rendered output failed.
    - INTERNAL: Anything that is not an SdsError.
    """

    CONFIGURATION = "configuration"
    NETWORK = "network"
    VALIDATION = "validation"
    PARSING = "parsing"
    AI_PROVIDER = "ai_provider"
    GENERATION = "generation"
    FILE_IO = "file_io"
    INTERNAL = "internal"


class SdsError(RuntimeError):
    """Represents an expected, structured failure raised by the generator.

    The optional data payload carries machine-readable context
    (e.g., provider name, offending field, endpoint, status code).
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, *, data: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.data: dict[str, object] = dict(data or {})

    def __str__(self) -> str:
        return self.message


class ConfigurationError(SdsError):
    kind = ErrorKind.CONFIGURATION


class NetworkError(SdsError):
    kind = ErrorKind.NETWORK

    def __init__(self, message: str, *, endpoint: str, status_code: int = 0) -> None:
        super().__init__(message, data={"endpoint": endpoint, "status_code": int(status_code)})
        self.endpoint = endpoint
        self.status_code = int(status_code)


class ValidationError(SdsError):
    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, *, field: str | None = None, data: dict[str, object] | None = None) -> None:
        payload = dict(data or {})
        if field is not None:
            payload["field"] = field
        super().__init__(message, data=payload)
        self.field = field


class ParsingError(SdsError):
    kind = ErrorKind.PARSING

    def __init__(self, message: str, *, original_response: str = "") -> None:
        super().__init__(message, data={"response_preview": original_response[:200]})
        self.original_response = original_response


class AIProviderError(SdsError):
    """Terminal failure of one provider after its retry budget is spent."""

    kind = ErrorKind.AI_PROVIDER

    def __init__(self, message: str, *, provider: str, cause: BaseException | None = None) -> None:
        data: dict[str, object] = {"provider": provider}
        if cause is not None:
            data["cause"] = f"{type(cause).__name__}: {cause}"
        super().__init__(message, data=data)
        self.provider = provider
        self.cause = cause


class ModuleGenerationError(SdsError):
    kind = ErrorKind.GENERATION

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        data: dict[str, object] = {}
        if cause is not None:
            data["cause"] = f"{type(cause).__name__}: {cause}"
            if isinstance(cause, SdsError):
                data["cause_kind"] = cause.kind.value
        super().__init__(message, data=data)
        self.cause = cause


class FileIOError(SdsError):
    kind = ErrorKind.FILE_IO

    def __init__(self, message: str, *, path: str, operation: str) -> None:
        super().__init__(message, data={"path": path, "operation": operation})
        self.path = path
        self.operation = operation


# --------------------
# Classification
# --------------------
RPC_INVALID_PARAMS = -32602
RPC_INTERNAL_ERROR = -32603

_RPC_CODES: dict[ErrorKind, int] = {
    ErrorKind.CONFIGURATION: RPC_INVALID_PARAMS,
    ErrorKind.VALIDATION: RPC_INVALID_PARAMS,
    ErrorKind.NETWORK: RPC_INTERNAL_ERROR,
    ErrorKind.PARSING: RPC_INTERNAL_ERROR,
    ErrorKind.AI_PROVIDER: RPC_INTERNAL_ERROR,
    ErrorKind.GENERATION: RPC_INTERNAL_ERROR,
    ErrorKind.FILE_IO: RPC_INTERNAL_ERROR,
    ErrorKind.INTERNAL: RPC_INTERNAL_ERROR,
}


def classify(exc: BaseException) -> ErrorKind:
    """Returns the ErrorKind of an exception; foreign exceptions are INTERNAL."""
    if isinstance(exc, SdsError):
        return exc.kind
    return ErrorKind.INTERNAL


def user_message(exc: BaseException) -> str:
    """Returns the short human-readable message shown to CLI and RPC callers."""
    kind = classify(exc)
    if kind is ErrorKind.AI_PROVIDER:
        provider = getattr(exc, "provider", "AI")
        return f"Failed to get a response from the {provider} API: {exc}. Please check your API keys in the .env file."
    if kind is ErrorKind.PARSING:
        return "The AI response could not be parsed. This may be a temporary issue - please try again."
    if kind is ErrorKind.CONFIGURATION:
        return f"Configuration error: {exc}"
    if kind is ErrorKind.VALIDATION:
        field = getattr(exc, "field", None)
        return f"Validation error in {field}: {exc}" if field else f"Validation error: {exc}"
    if kind is ErrorKind.FILE_IO:
        return f"File operation failed ({getattr(exc, 'operation', 'unknown')}): {exc}"
    if kind is ErrorKind.NETWORK:
        return f"Network error accessing {getattr(exc, 'endpoint', 'provider')}: {exc}"
    if kind is ErrorKind.GENERATION:
        return f"Specification generation failed: {exc}"
    return f"An unexpected error occurred: {exc}"


def rpc_error(exc: BaseException, *, development: bool = False) -> tuple[int, str, dict[str, object]]:
    """Converts an exception into (code, message, data) for a JSON-RPC error envelope."""
    kind = classify(exc)
    data: dict[str, object] = {"kind": kind.value}
    if isinstance(exc, SdsError):
        data.update(exc.data)
    if development:
        data["traceback"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return _RPC_CODES[kind], user_message(exc), data


def describe_for_cli(exc: BaseException) -> str:
    return f"Operation failed: {user_message(exc)}"
