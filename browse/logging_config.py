"""SPDX-License-Identifier: GPL-3.0-only

File logging for recoll-outline.

``configure_logging`` attaches one file handler to the root logger and
writes plain ``[ts] LEVEL logger: msg`` lines, or JSON objects when
``json_mode`` is set. The file rolls over to ``<name>.1`` once it passes
``rotate_mb``. Calling it again only changes the level;
``set_runtime_level`` does the same from inside a running shell.

Logs go to a file so they never interleave with the interactive display.
"""
from __future__ import annotations
import logging, os, json, threading, time
from pathlib import Path
from typing import Optional

_LOCK = threading.Lock()
_CONFIGURED = False
_CURRENT_LEVEL = 'INFO'
_JSON_MODE = False
_ROTATE_MB = 2
_LOG_PATH: Optional[Path] = None


class _SizedRotatingHandler(logging.Handler):
    def __init__(self, path: Path, rotate_mb: int) -> None:
        super().__init__()
        self.path = path
        self.rotate_bytes = max(1, min(rotate_mb, 64)) * 1024 * 1024
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def emit(self, record: logging.LogRecord) -> None:  # noqa: D401
        try:
            data = self.format(record) + '\n'
            if self.path.exists() and self.path.stat().st_size + len(data.encode('utf-8')) > self.rotate_bytes:
                rolled = self.path.with_suffix(self.path.suffix + '.1')
                rolled.unlink(missing_ok=True)
                self.path.rename(rolled)
            with self.path.open('a', encoding='utf-8') as fh:
                fh.write(data)
        except Exception:  # pragma: no cover
            self.handleError(record)


class _DualFormatter(logging.Formatter):
    def __init__(self, json_mode: bool):
        super().__init__()
        self.json_mode = json_mode

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        base = {
            'ts': time.strftime('%Y-%m-%dT%H:%M:%S', time.localtime(record.created)) + f".{int(record.msecs):03d}",
            'level': record.levelname,
            'logger': record.name,
            'msg': record.getMessage(),
        }
        if record.exc_info:
            base['exc'] = self.formatException(record.exc_info)
        if self.json_mode:
            return json.dumps(base, ensure_ascii=False)
        line = f"[{base['ts']}] {base['level']} {base['logger']}: {base['msg']}"
        if 'exc' in base:
            line += '\n' + base['exc']
        return line


def configure_logging(level: str = 'INFO', json_mode: bool = False, rotate_mb: int = 2, log_path: Optional[Path] = None) -> Path:
    """Install the file handler on the root logger (once) and set the level.

    Returns the log file path in use.
    """
    global _CONFIGURED, _CURRENT_LEVEL, _JSON_MODE, _ROTATE_MB, _LOG_PATH
    with _LOCK:
        _CURRENT_LEVEL = (level or 'INFO').upper()
        _JSON_MODE = bool(json_mode)
        _ROTATE_MB = min(rotate_mb, 64) if rotate_mb and rotate_mb > 0 else 2
        if _CONFIGURED and _LOG_PATH is not None:
            logging.getLogger().setLevel(_CURRENT_LEVEL)
            return _LOG_PATH
        if not log_path:
            base_dir = Path(os.environ.get('RECOLL_OUTLINE_BASE_DIR') or 'data')
            log_path = base_dir / 'recoll-outline.log'
        _LOG_PATH = log_path
        handler = _SizedRotatingHandler(log_path, _ROTATE_MB)
        handler.setFormatter(_DualFormatter(_JSON_MODE))
        root = logging.getLogger()
        root.setLevel(_CURRENT_LEVEL)
        # only our file handler writes
        for h in list(root.handlers):
            root.removeHandler(h)
        root.addHandler(handler)
        _CONFIGURED = True
        return log_path


def set_runtime_level(level: str) -> None:
    global _CURRENT_LEVEL
    with _LOCK:
        _CURRENT_LEVEL = (level or 'INFO').upper()
        logging.getLogger().setLevel(_CURRENT_LEVEL)


def get_runtime_level() -> str:
    return _CURRENT_LEVEL


def _reset_for_tests() -> None:
    global _CONFIGURED, _LOG_PATH
    with _LOCK:
        root = logging.getLogger()
        for h in list(root.handlers):
            if isinstance(h, _SizedRotatingHandler):
                root.removeHandler(h)
        _CONFIGURED = False
        _LOG_PATH = None
        root.setLevel(logging.WARNING)


__all__ = ['configure_logging', 'set_runtime_level', 'get_runtime_level']
