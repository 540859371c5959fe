import pytest

from sdsgen.errors import (
    RPC_INTERNAL_ERROR,
    RPC_INVALID_PARAMS,
    AIProviderError,
    ConfigurationError,
    ErrorKind,
    FileIOError,
    ModuleGenerationError,
    NetworkError,
    ParsingError,
    ValidationError,
    classify,
    describe_for_cli,
    rpc_error,
)


@pytest.mark.parametrize(
    "exc,code",
    [
        (ConfigurationError("no keys"), RPC_INVALID_PARAMS),
        (ValidationError("bad", field="x"), RPC_INVALID_PARAMS),
        (NetworkError("down", endpoint="u", status_code=502), RPC_INTERNAL_ERROR),
        (ParsingError("nope"), RPC_INTERNAL_ERROR),
        (AIProviderError("failed", provider="claude"), RPC_INTERNAL_ERROR),
        (ModuleGenerationError("failed"), RPC_INTERNAL_ERROR),
        (FileIOError("disk", path="/x", operation="write"), RPC_INTERNAL_ERROR),
        (KeyError("boom"), RPC_INTERNAL_ERROR),
    ],
)
def test_every_kind_maps_to_a_code(exc, code):
    assert rpc_error(exc)[0] == code


def test_foreign_exceptions_are_internal():
    assert classify(ZeroDivisionError()) is ErrorKind.INTERNAL


def test_rpc_error_data_carries_kind_and_context():
    code, message, data = rpc_error(ValidationError("Missing", field="session_id"))
    assert data == {"kind": "validation", "field": "session_id"}
    assert "session_id" in message


def test_traceback_only_in_development():
    try:
        raise NetworkError("down", endpoint="u")
    except NetworkError as e:
        assert "traceback" not in rpc_error(e)[2]
        assert "NetworkError" in rpc_error(e, development=True)[2]["traceback"]


def test_generation_error_records_cause_kind():
    cause = ParsingError("x")
    err = ModuleGenerationError("failed", cause=cause)
    assert err.data["cause_kind"] == "parsing"
    assert err.cause is cause


def test_cli_message_prefix():
    assert describe_for_cli(ConfigurationError("No API keys")) == "Operation failed: Configuration error: No API keys"
