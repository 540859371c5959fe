import logging
import os

from sdsgen.config import Settings, configure_logging, load_env_file


def test_defaults_when_environment_is_empty():
    s = Settings.from_env({})
    assert s.timeout_s == 30.0
    assert s.batch_size == 3
    assert s.batch_delay_s == 1.0
    assert s.preferred_provider == "claude"
    assert s.max_retries == 1
    assert s.log_level == "info"
    assert s.max_sessions is None
    assert s.development is False


def test_values_are_read_in_milliseconds():
    s = Settings.from_env(
        {
            "API_TIMEOUT": "45000",
            "BATCH_SIZE": "5",
            "BATCH_DELAY": "0",
            "PREFERRED_API": "OpenAI",
            "API_RETRIES": "3",
            "RETRY_BACKOFF": "250",
            "LOG_LEVEL": "DEBUG",
            "SDS_MAX_SESSIONS": "10",
            "NODE_ENV": "development",
        }
    )
    assert s.timeout_s == 45.0
    assert s.batch_size == 5
    assert s.batch_delay_s == 0.0
    assert s.preferred_provider == "openai"
    assert s.max_retries == 3
    assert s.retry_backoff_s == 0.25
    assert s.log_level == "debug"
    assert s.max_sessions == 10
    assert s.development is True


def test_invalid_values_fall_back_to_defaults():
    s = Settings.from_env({"API_TIMEOUT": "soon", "BATCH_SIZE": "0", "LOG_LEVEL": "loud", "API_RETRIES": "-2"})
    assert s.timeout_s == 30.0
    assert s.batch_size == 3
    assert s.log_level == "info"
    assert s.max_retries == 1


def test_env_file_does_not_override_existing_variables(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("SDS_TEST_A=from_file\nSDS_TEST_B=from_file\n", encoding="utf-8")
    monkeypatch.setenv("SDS_TEST_A", "from_process")
    # setenv first so teardown removes the variable load_env_file creates
    monkeypatch.setenv("SDS_TEST_B", "")
    monkeypatch.delenv("SDS_TEST_B")

    assert load_env_file(env_file) is True
    assert os.environ["SDS_TEST_A"] == "from_process"
    assert os.environ["SDS_TEST_B"] == "from_file"


def test_missing_env_file_is_not_an_error(tmp_path):
    assert load_env_file(tmp_path / "absent.env") is False


def test_configure_logging_installs_a_single_handler():
    configure_logging("debug")
    configure_logging("warn")
    root = logging.getLogger()
    ours = [h for h in root.handlers if getattr(h, "_sdsgen", False)]
    assert len(ours) == 1
    assert root.level == logging.WARNING
    root.removeHandler(ours[0])
