"""
Utilities for building the environment used by the Interledger client.

Values come from ``os.environ`` (or an explicit ``base`` mapping), an optional
``.env`` file that only fills in missing keys, and overrides that always win.
The result is a plain mapping consumed by
:class:`interledger_payments.core.config.ClientConfig`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, MutableMapping, Optional, Tuple

__all__ = ["ClientEnvironment", "ENV_PREFIX", "build_environment", "load_env_file"]

ENV_PREFIX = "ILP_"


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _split_assignment(line: str) -> Optional[Tuple[str, str]]:
    line = line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    if line.startswith("export "):
        line = line[len("export "):].lstrip()
    key, value = line.split("=", 1)
    return key.strip(), value.strip()


def _parse_env_file(path: Path) -> Dict[str, str]:
    """
    Parse ``KEY=VALUE`` lines.

    A value opened with ``"`` and not closed on the same line continues until
    a line ending in ``"``, so a PEM key can be pasted as-is.
    """
    values: Dict[str, str] = {}
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except FileNotFoundError:
        return values

    open_key: Optional[str] = None
    collected: List[str] = []
    for raw_line in lines:
        if open_key is not None:
            stripped = raw_line.rstrip()
            if stripped.endswith('"'):
                collected.append(stripped[:-1])
                values[open_key] = "\n".join(collected)
                open_key, collected = None, []
            else:
                collected.append(raw_line)
            continue

        assignment = _split_assignment(raw_line)
        if assignment is None:
            continue
        key, value = assignment
        if value.startswith('"') and (len(value) == 1 or not value.endswith('"')):
            open_key, collected = key, [value[1:]]
            continue
        values[key] = _unquote(value)

    if open_key is not None:
        logging.warning("Unterminated quoted value for %s in %s; ignoring it", open_key, path)
    return values


def load_env_file(
    path: str = ".env",
    *,
    environ: Optional[MutableMapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Load ``path`` into ``environ`` without replacing keys that are already set.

    Returns the merged mapping.
    """
    target: MutableMapping[str, str] = environ if environ is not None else os.environ
    for key, value in _parse_env_file(Path(path)).items():
        target.setdefault(key, value)
    return dict(target)


@dataclass(frozen=True)
class ClientEnvironment:
    """Resolved ``ILP_*`` settings."""

    variables: Mapping[str, str]

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.variables.get(key, default)


def build_environment(
    *,
    env_file: Optional[str] = ".env",
    base: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> ClientEnvironment:
    """
    Assemble a :class:`ClientEnvironment`.

    Only ``ILP_*`` keys are kept from ``base`` (default :data:`os.environ`)
    and the env file. Set ``env_file`` to ``None`` to skip file loading.
    """
    source = os.environ if base is None else base
    merged: Dict[str, str] = {
        key: value for key, value in source.items() if key.startswith(ENV_PREFIX)
    }

    if env_file is not None:
        for key, value in _parse_env_file(Path(env_file)).items():
            if key.startswith(ENV_PREFIX):
                merged.setdefault(key, value)

    if overrides:
        merged.update(overrides)

    return ClientEnvironment(variables=merged)
