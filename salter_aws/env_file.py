from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path


NEW_ENTRY_PATTERN = re.compile(r"^[A-Z_][A-Z0-9_]*=")


class EnvFileError(RuntimeError):
    """Raised when a .env file cannot be read or written."""


def _is_skippable(line: str) -> bool:
    return not line or line.startswith("#")


def parse_env_text(text: str) -> list[tuple[str, str]]:
    """
    Parse ``KEY=VALUE`` text into ordered pairs.

    Values may span several lines (PEM blocks, for example): any non-blank
    line that does not look like ``UPPER_KEY=`` is appended to the value of
    the open entry, joined with ``\\n``. Duplicate keys are kept as separate
    entries; use ``to_mapping`` to collapse them.
    """
    lines = [raw.strip() for raw in text.split("\n")]
    entries: list[tuple[str, str]] = []
    index = 0
    while index < len(lines):
        line = lines[index]
        index += 1
        if _is_skippable(line) or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        while index < len(lines):
            continuation = lines[index]
            if NEW_ENTRY_PATTERN.match(continuation):
                break
            if continuation:
                value += "\n" + continuation
            index += 1
        entries.append((key, value))
    return entries


def to_mapping(entries: Iterable[tuple[str, str]]) -> dict[str, str]:
    # Last occurrence wins; dict keeps the position of the first one.
    mapping: dict[str, str] = {}
    for key, value in entries:
        mapping[key] = value
    return mapping


def render_env(pairs: Iterable[tuple[str, str]]) -> str:
    return "".join(f"{key}={value}\n" for key, value in pairs)


def read_env_file(path: str | Path) -> list[tuple[str, str]]:
    env_path = Path(path)
    try:
        text = env_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise EnvFileError(f"failed to read env file {env_path}: {exc}") from exc
    return parse_env_text(text)


def write_env_file(path: str | Path, pairs: Iterable[tuple[str, str]]) -> Path:
    env_path = Path(path)
    try:
        env_path.write_text(render_env(pairs), encoding="utf-8")
    except OSError as exc:
        raise EnvFileError(f"failed to write .env file {env_path}: {exc}") from exc
    return env_path
