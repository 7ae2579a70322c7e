"""
JSON document store shared by the collection stores.

Each collection lives in its own document shaped as ``{"<key>": [ ... ]}``.
Reads always parse the whole file and writes always replace the whole file;
nothing is cached between calls.

Features:
- Atomic writes through a temporary file and os.replace, so readers never see a half-written document
- Blocking file I/O runs in a worker thread via asyncio.to_thread
- Every read/parse/write failure, and any record that does not fit its schema, surfaces as StorageError
"""
from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]
ModelT = TypeVar("ModelT", bound=BaseModel)


class StorageError(Exception):
    """A collection document could not be read, parsed or written."""

    def __init__(self, message: str, path: PathLike | None = None):
        super().__init__(message)
        self.path = str(path) if path is not None else None


def next_id(ids: Iterable[int]) -> int:
    """Return max(existing ids) + 1, or 1 for an empty collection.

    Gaps left by deleting a middle record stay gaps. Deleting the highest id
    makes that id available again, since the next id is derived from what is stored.
    """
    return max(ids, default=0) + 1


def parse_records(model: Type[ModelT], items: List[Dict[str, Any]], path: PathLike | None = None) -> List[ModelT]:
    """Validate raw records into `model` instances.

    A record that does not fit the schema raises StorageError, like any other
    unexpected document shape.
    """
    try:
        return [model.model_validate(item) for item in items]
    except ValidationError as e:
        raise StorageError(f"Invalid {model.__name__} record in {path}: {e}", path) from e


def _read_collection(path: Path, key: str) -> List[Dict[str, Any]]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise StorageError(f"Malformed JSON in {path}: {e}", path) from e
    except OSError as e:
        raise StorageError(f"Unable to read {path}: {e}", path) from e

    if not isinstance(data, dict):
        raise StorageError(f"Expected a JSON object at the top of {path}", path)

    items = data.get(key, [])
    if not isinstance(items, list):
        raise StorageError(f"Expected a list under '{key}' in {path}", path)
    return items


def _write_collection(path: Path, key: str, items: List[Dict[str, Any]]) -> None:
    payload = json.dumps({key: items}, indent=2, ensure_ascii=False)
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", delete=False, dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", encoding="utf-8"
        ) as tmp:
            tmp.write(payload)
            tmp_path = tmp.name
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise StorageError(f"Unable to write {path}: {e}", path) from e


async def load_collection(path: PathLike, key: str) -> List[Dict[str, Any]]:
    """Read the whole document at `path` and return the list stored under `key`.

    Returns an empty list when the key is absent. A missing file, unreadable file,
    malformed JSON or unexpected document shape raises StorageError.
    """
    return await asyncio.to_thread(_read_collection, Path(path), key)


async def save_collection(path: PathLike, key: str, items: List[Dict[str, Any]]) -> None:
    """Serialize ``{key: items}`` and replace the document at `path` in one step."""
    await asyncio.to_thread(_write_collection, Path(path), key, items)
    logger.debug("collection_saved", extra={"collection": key, "count": len(items), "path": str(path)})


async def ensure_document(path: PathLike, key: str) -> bool:
    """Create an empty ``{key: []}`` document when `path` does not exist yet.

    Returns True when a document was created. Existing files are never touched.
    """
    target = Path(path)
    if target.exists():
        return False
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageError(f"Unable to create directory for {target}: {e}", target) from e
    await save_collection(target, key, [])
    logger.info("collection_initialized", extra={"collection": key, "path": str(target)})
    return True


class JsonCollection:
    """Storage port for one collection document.

    Stores only depend on the two coroutines `load()` and `save(items)` plus the
    `path` used in error messages, so tests can hand them any object exposing those.
    """

    def __init__(self, path: PathLike, key: str):
        self.path = Path(path)
        self.key = key

    async def load(self) -> List[Dict[str, Any]]:
        return await load_collection(self.path, self.key)

    async def save(self, items: List[Dict[str, Any]]) -> None:
        await save_collection(self.path, self.key, items)

    async def ensure(self) -> bool:
        return await ensure_document(self.path, self.key)

    def __repr__(self) -> str:
        return f"JsonCollection(path={str(self.path)!r}, key={self.key!r})"
