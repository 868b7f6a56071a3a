from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any

from .errors import PersistenceError


class _NotFound:
    """Sentinel returned by read_json when the file does not exist yet."""

    _instance = None

    def __new__(cls) -> "_NotFound":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = _NotFound()


async def read_json(path: Path, default: Any = NOT_FOUND) -> Any:
    def _read() -> Any:
        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except FileNotFoundError:
            return default
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Malformed JSON in {path}: {exc}", path=str(path)) from exc
        except OSError as exc:
            raise PersistenceError(f"Failed to read {path}: {exc}", path=str(path)) from exc

    return await asyncio.to_thread(_read)


async def write_json_atomic(path: Path, data: Any) -> None:
    def _write() -> None:
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as exc:
            try:
                tmp_path.unlink()
            except OSError:
                pass
            raise PersistenceError(f"Failed to write {path}: {exc}", path=str(path)) from exc

    await asyncio.to_thread(_write)
