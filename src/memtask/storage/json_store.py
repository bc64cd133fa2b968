# src/memtask/storage/json_store.py

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

import aiofiles
import aiofiles.os

from ..core.ports import EntityDoc

logger = logging.getLogger(__name__)

_SUFFIX = ".json"
_TMP_PREFIX = ".tmp_"


class JsonFileStore:
    """
    One JSON document per entity: `<root>/<id>.json`.

    File I/O goes through aiofiles, so the calling coroutine suspends while
    a read/write is in flight.

    Each write lands in its own temp file (`.tmp_*`) and is moved into place
    with an atomic replace: a reader never sees a half-written document, and
    two concurrent saves of one id end as last-write-wins.
    """

    def __init__(self, root: str | Path, *, kind: str = "entity") -> None:
        self._root = Path(root)
        self._kind = kind
        self._root.mkdir(parents=True, exist_ok=True)
        logger.info("JsonFileStore ready kind=%s dir=%s", kind, self._root)

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, entity_id: str) -> Path:
        return self._root / f"{entity_id}{_SUFFIX}"

    async def save(self, entity_id: str, doc: EntityDoc) -> None:
        payload = json.dumps(doc, ensure_ascii=False, indent=2)
        fd, tmp_path = tempfile.mkstemp(dir=self._root, prefix=_TMP_PREFIX, suffix=".tmp")
        os.close(fd)
        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            await aiofiles.os.replace(tmp_path, self._path(entity_id))
        finally:
            if await aiofiles.os.path.exists(tmp_path):
                await aiofiles.os.remove(tmp_path)
        logger.debug("Saved %s id=%s", self._kind, entity_id)

    async def load(self, entity_id: str) -> EntityDoc | None:
        try:
            async with aiofiles.open(self._path(entity_id), "r", encoding="utf-8") as f:
                raw = await f.read()
        except FileNotFoundError:
            return None
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"{self._kind} document {entity_id} is not a JSON object")
        return data

    async def delete(self, entity_id: str) -> bool:
        try:
            await aiofiles.os.remove(self._path(entity_id))
        except FileNotFoundError:
            return False
        logger.debug("Deleted %s id=%s", self._kind, entity_id)
        return True

    async def list_ids(self) -> list[str]:
        names = await aiofiles.os.listdir(self._root)
        return sorted(
            name[: -len(_SUFFIX)]
            for name in names
            if name.endswith(_SUFFIX) and not name.startswith(".")
        )
