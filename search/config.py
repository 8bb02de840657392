"""SPDX-License-Identifier: GPL-3.0-only

User-settable configuration for the Recoll outline front-end.

Values resolve as built-in defaults, then ``RECOLL_OUTLINE_*`` environment
variables, then explicit overrides (normally argparse flags).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

ENV_PREFIX = "RECOLL_OUTLINE_"

_TRUE = {"1", "TRUE", "YES", "Y", "ON"}
_FALSE = {"0", "FALSE", "NO", "N", "OFF"}


@dataclass(frozen=True)
class Settings:
    """Front-end settings.

    Attributes:
        results_per_page: Page size used by the result window.
        engine_command: Engine invocation prefix (flags appended per call).
        index_command: Command launched to refresh the index.
        auto_file_search: Search the opened file for the reduced query.
        prompt_before_search: Ask before that search so the term can be edited.
        result_read_only: Mark opened documents read-only.
        render_markup: Render HTML documents to readable text before display.
        wrap_width: Fill column for abstract paragraphs.
        base_dir: Directory for logs and the extracted-text cache.
    """

    results_per_page: int = 10
    engine_command: str = "recoll -t -A"
    index_command: str = "recollindex"
    auto_file_search: bool = True
    prompt_before_search: bool = True
    result_read_only: bool = True
    render_markup: bool = True
    wrap_width: int = 70
    base_dir: Path = Path("data")

    @property
    def cache_dir(self) -> Path:
        return self.base_dir / "textcache"

    @property
    def log_path(self) -> Path:
        return self.base_dir / "recoll-outline.log"

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a copy with the non-None overrides applied."""
        clean = {k: v for k, v in overrides.items() if v is not None}
        return _validated(replace(self, **clean))


def parse_bool(raw: str) -> bool:
    val = raw.strip().upper()
    if val in _TRUE:
        return True
    if val in _FALSE:
        return False
    raise ValueError(f"Not a boolean value: {raw!r}")


def _coerce(kind: Any, raw: str) -> Any:
    if kind in (bool, "bool"):
        return parse_bool(raw)
    if kind in (int, "int"):
        return int(raw.strip())
    if kind in (Path, "Path"):
        return Path(raw.strip())
    return raw


def _validated(settings: Settings) -> Settings:
    if settings.results_per_page < 1:
        raise ValueError("results_per_page must be at least 1")
    if settings.wrap_width < 10:
        raise ValueError("wrap_width must be at least 10")
    if not settings.engine_command.strip():
        raise ValueError("engine_command must not be empty")
    return settings


def load_settings(environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> Settings:
    """Build settings from the environment plus explicit overrides.

    Args:
        environ: Mapping to read variables from (defaults to ``os.environ``).
        **overrides: Field values that win over the environment; ``None`` is ignored.

    Returns:
        Settings: The resolved configuration.

    Raises:
        ValueError: If a variable cannot be parsed or a value is out of range.
    """
    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}
    for f in fields(Settings):
        raw = env.get(ENV_PREFIX + f.name.upper())
        if raw is None or raw.strip() == "":
            continue
        try:
            values[f.name] = _coerce(f.type, raw)
        except ValueError as exc:
            raise ValueError(f"{ENV_PREFIX}{f.name.upper()}: {exc}") from exc
    return _validated(Settings(**values)).with_overrides(**overrides)
