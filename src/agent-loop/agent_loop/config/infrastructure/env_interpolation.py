"""Recursive ${ENV_VAR} interpolation for raw config data.

`${NAME}` is replaced by the variable's value and is required to be set.
`${NAME:-fallback}` uses `fallback` when NAME is unset and is never reported
as missing.
"""

import os
import re

_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")

type RawValue = (
    str | int | float | bool | None | list["RawValue"] | dict[str, "RawValue"]
)


def collect_missing_vars(data: RawValue) -> list[str]:
    """Return every referenced, unset variable that has no fallback, in order of first use."""
    missing: list[str] = []
    _collect(data, missing)
    return missing


def _collect(data: RawValue, missing: list[str]) -> None:
    if isinstance(data, str):
        for match in _ENV_VAR_PATTERN.finditer(data):
            var_name, fallback = match.group(1), match.group(2)
            if fallback is not None:
                continue
            if var_name not in os.environ and var_name not in missing:
                missing.append(var_name)
    elif isinstance(data, list):
        for item in data:
            _collect(item, missing)
    elif isinstance(data, dict):
        for value in data.values():
            _collect(value, missing)


def _substitute(match: re.Match[str]) -> str:
    var_name, fallback = match.group(1), match.group(2)
    if fallback is not None:
        return os.environ.get(var_name, fallback)
    return os.environ[var_name]


def interpolate(data: RawValue) -> RawValue:
    """Recursively substitute all ${ENV_VAR} occurrences with their runtime values.

    Call `collect_missing_vars` first; a required variable that is absent
    raises KeyError here.
    """
    if isinstance(data, str):
        return _ENV_VAR_PATTERN.sub(_substitute, data)
    if isinstance(data, list):
        return [interpolate(item) for item in data]
    if isinstance(data, dict):
        return {key: interpolate(value) for key, value in data.items()}
    return data
