"""Runtime settings for the Quill interpreter, read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

RECURSION_LIMIT_VAR = "QUILL_RECURSION_LIMIT"
ECHO_OUTPUT_VAR = "QUILL_ECHO_OUTPUT"

DEFAULT_RECURSION_LIMIT = 20000

_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off", ""})


@dataclass(frozen=True)
class Settings:
    """
    recursion_limit: Python recursion limit in force while a program runs.
      Each Quill call costs several host frames, so deep user recursion needs
      headroom above the interpreter default.
    echo_output: when set, printed lines also go to stdout.
    """

    recursion_limit: int = DEFAULT_RECURSION_LIMIT
    echo_output: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        return cls(
            recursion_limit=_int_setting(env, RECURSION_LIMIT_VAR, DEFAULT_RECURSION_LIMIT),
            echo_output=_bool_setting(env, ECHO_OUTPUT_VAR, False),
        )


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default

    try:
        value = int(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None

    if value < 1000:
        raise ValueError(f"{name} must be at least 1000, got {value}")

    return value


def _bool_setting(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default

    word = raw.strip().lower()

    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False

    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")
