"""Profile persistence for linkfolio."""

import asyncio
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable

from pydantic import ValidationError

from .models import ProfileRecord

logger = logging.getLogger(__name__)

MergeFn = Callable[[ProfileRecord | None], ProfileRecord]


class ProfileStoreError(Exception):
    """The profile store could not be read or written."""

    pass


class ProfileStore(ABC):
    """Key-value store of profile records keyed by Discord user id."""

    @abstractmethod
    async def get(self, primary_id: str) -> ProfileRecord | None:
        """Return the stored record, or None if the user has none yet."""
        pass

    @abstractmethod
    async def upsert(self, primary_id: str, merge: MergeFn) -> ProfileRecord:
        """
        Load the record for primary_id, pass it (or None) to merge, and save the result.

        Returns:
            The record as saved
        """
        pass


class JsonProfileStore(ProfileStore):
    """Profiles kept in a single pretty-printed JSON object on disk.

    All load-merge-save cycles share one lock because every write rewrites
    the whole file. The file is replaced atomically so a crash mid-write
    never leaves a truncated store behind.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load profiles from {self.path}: {e}")
            raise ProfileStoreError(f"Failed to load profiles: {e}") from e

        if not isinstance(data, dict):
            raise ProfileStoreError(f"Profiles file {self.path} is not a JSON object")
        return data

    def _save(self, profiles: dict[str, Any]) -> None:
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=directory, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(profiles, f, indent=2)
                    f.write("\n")
                os.replace(tmp_path, self.path)
            except BaseException:
                os.unlink(tmp_path)
                raise
        except OSError as e:
            logger.error(f"Failed to save profiles to {self.path}: {e}")
            raise ProfileStoreError(f"Failed to save profiles: {e}") from e

    def _parse(self, primary_id: str, data: Any) -> ProfileRecord:
        if not isinstance(data, dict):
            raise ProfileStoreError(f"Profile {primary_id} is not a JSON object")
        try:
            return ProfileRecord.from_storage(primary_id, data)
        except ValidationError as e:
            raise ProfileStoreError(f"Profile {primary_id} is invalid: {e}") from e

    async def get(self, primary_id: str) -> ProfileRecord | None:
        async with self._lock:
            data = self._load().get(primary_id)
        if data is None:
            return None
        return self._parse(primary_id, data)

    async def upsert(self, primary_id: str, merge: MergeFn) -> ProfileRecord:
        async with self._lock:
            profiles = self._load()
            existing = profiles.get(primary_id)
            current = self._parse(primary_id, existing) if existing is not None else None

            record = merge(current)
            if record.primary_id != primary_id:
                raise ValueError(
                    f"Merged record belongs to {record.primary_id}, not {primary_id}"
                )

            # Start from the stored dict so keys this version doesn't model survive
            profiles[primary_id] = {**(existing or {}), **record.to_storage()}
            self._save(profiles)

        logger.debug(f"Saved profile {primary_id}")
        return record
