"""Idempotent ``.env`` file updates.

Database and deployment setup steps append placeholder variables to a
package's ``.env``.  Keys already present are left alone, so running a step
twice never duplicates a line or clobbers a value the user filled in.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

_ENV_KEY_RE = re.compile(r"^\s*(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=")


@dataclass(frozen=True)
class EnvVariable:
    """A variable to add; skipped entirely when ``condition`` is false."""

    key: str
    value: str = ""
    condition: bool = True


def read_env_keys(env_path: Path) -> set[str]:
    """Return the variable names defined in *env_path* (empty if missing)."""
    if not env_path.exists():
        return set()
    keys: set[str] = set()
    for line in env_path.read_text(encoding="utf-8").splitlines():
        match = _ENV_KEY_RE.match(line)
        if match:
            keys.add(match.group(1))
    return keys


def add_env_variables(env_path: str | Path, variables: list[EnvVariable]) -> int:
    """Append *variables* to *env_path*, skipping keys that already exist.

    The file and its parent directory are created when missing.

    Returns:
        Number of variables written.
    """
    path = Path(env_path)
    existing = read_env_keys(path)

    new_lines: list[str] = []
    for variable in variables:
        if not variable.condition or variable.key in existing:
            continue
        new_lines.append(f"{variable.key}={variable.value}")
        existing.add(variable.key)

    if not new_lines:
        return 0

    path.parent.mkdir(parents=True, exist_ok=True)
    prefix = ""
    if path.exists():
        current = path.read_text(encoding="utf-8")
        if current and not current.endswith("\n"):
            prefix = "\n"
    with path.open("a", encoding="utf-8") as f:
        f.write(prefix + "\n".join(new_lines) + "\n")
    return len(new_lines)
