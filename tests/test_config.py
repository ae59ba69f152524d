from __future__ import annotations

import pytest

from quill.config import DEFAULT_RECURSION_LIMIT, Settings


def test_defaults() -> None:
    settings = Settings.from_env({})

    assert settings.recursion_limit == DEFAULT_RECURSION_LIMIT
    assert settings.echo_output is False


def test_reads_process_environment(monkeypatch) -> None:
    monkeypatch.setenv("QUILL_RECURSION_LIMIT", "5000")
    monkeypatch.setenv("QUILL_ECHO_OUTPUT", "on")

    assert Settings.from_env() == Settings(recursion_limit=5000, echo_output=True)


@pytest.mark.parametrize(
    "raw, expected",
    [
        pytest.param("1", True, id="one"),
        pytest.param("TRUE", True, id="upper-true"),
        pytest.param(" yes ", True, id="padded-yes"),
        pytest.param("0", False, id="zero"),
        pytest.param("off", False, id="off"),
        pytest.param("", False, id="empty"),
    ],
)
def test_echo_flag_words(raw: str, expected: bool) -> None:
    assert Settings.from_env({"QUILL_ECHO_OUTPUT": raw}).echo_output is expected


def test_blank_recursion_limit_uses_default() -> None:
    assert Settings.from_env({"QUILL_RECURSION_LIMIT": "  "}).recursion_limit == DEFAULT_RECURSION_LIMIT


@pytest.mark.parametrize(
    "env, message",
    [
        pytest.param({"QUILL_RECURSION_LIMIT": "lots"}, "must be an integer", id="limit-not-int"),
        pytest.param({"QUILL_RECURSION_LIMIT": "10"}, "must be at least 1000", id="limit-too-low"),
        pytest.param({"QUILL_ECHO_OUTPUT": "maybe"}, "must be a boolean flag", id="echo-not-bool"),
    ],
)
def test_invalid_values(env, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        Settings.from_env(env)


def test_settings_are_frozen() -> None:
    settings = Settings()

    with pytest.raises(AttributeError):
        settings.recursion_limit = 1  # type: ignore[misc]
