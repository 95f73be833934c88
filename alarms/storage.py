from __future__ import annotations

import asyncio
import json
import logging
import os
import time
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from time_utils import format_timestamp, now_utc, parse_timestamp

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Reading or writing the persisted alarm collection failed."""


@dataclass(frozen=True)
class AlarmRecord:
    id: str
    name: str
    interval: int
    created_at: str

    @property
    def started_at(self) -> datetime:
        return parse_timestamp(self.created_at)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "interval": self.interval,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AlarmRecord":
        if not isinstance(data, dict):
            raise ValueError("Alarm payload must be an object")
        alarm_id = data.get("id")
        name = data.get("name")
        interval = data.get("interval")
        created_raw = data.get("createdAt")
        if not isinstance(alarm_id, str) or not alarm_id:
            raise ValueError("Alarm payload missing id")
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"Alarm {alarm_id} has an empty name")
        if isinstance(interval, bool) or not isinstance(interval, int) or interval < 1:
            raise ValueError(f"Alarm {alarm_id} has an invalid interval: {interval!r}")
        parse_timestamp(created_raw)
        return cls(id=alarm_id, name=name, interval=interval, created_at=created_raw)


class FileStorage:
    """Key-value storage where each key is a JSON file under ``root``.

    Values are opaque strings. Writes go to a temp file first and are moved
    into place with ``os.replace``. Blocking file calls run in a worker thread.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        return self.root / f"{key}.json"

    async def get_item(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._read, self.path_for(key))

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, self.path_for(key), value)

    @staticmethod
    def _read(path: Path) -> Optional[str]:
        if not path.exists():
            return None
        data = path.read_bytes()
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            logger.warning("Stored value in %s is not valid UTF-8: %s", path, exc)
            return data.decode("utf-8", errors="replace")

    @staticmethod
    def _write(path: Path, value: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        try:
            with tmp.open("w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp, path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise


def generate_alarm_id() -> str:
    return f"al_{int(time.time() * 1000):x}_{uuid.uuid4().hex[:8]}"


def decode_collection(payload: Optional[str]) -> List[AlarmRecord]:
    if payload is None:
        return []
    try:
        items = json.loads(payload)
    except ValueError as exc:
        logger.warning("Persisted alarms are not valid JSON, treating as empty: %s", exc)
        return []
    if not isinstance(items, list):
        logger.warning("Persisted alarms are not a JSON array (%s), treating as empty", type(items).__name__)
        return []
    alarms: List[AlarmRecord] = []
    seen = set()
    for item in items:
        try:
            alarm = AlarmRecord.from_dict(item)
        except ValueError as exc:
            logger.warning("Skipping alarm item due to parse error: %s", exc)
            continue
        if alarm.id in seen:
            logger.warning("Skipping alarm item with duplicate id %s", alarm.id)
            continue
        seen.add(alarm.id)
        alarms.append(alarm)
    return alarms


def encode_collection(alarms: List[AlarmRecord]) -> str:
    return json.dumps([a.to_dict() for a in alarms])


class AlarmStore:
    """Owns the persisted alarm collection stored under one key.

    Every mutation re-reads the whole collection, transforms it and writes the
    whole collection back, then returns the new snapshot. Mutations on one
    store are serialized by an ``asyncio.Lock`` so that the read and the write
    of one cycle never interleave with another cycle.
    """

    def __init__(
        self,
        storage,
        key: str = "alarms",
        clock: Callable[[], datetime] = now_utc,
        id_factory: Callable[[], str] = generate_alarm_id,
    ):
        self.storage = storage
        self.key = key
        self.clock = clock
        self.id_factory = id_factory
        self._lock = asyncio.Lock()

    async def load_all(self) -> List[AlarmRecord]:
        return await self._read()

    async def add(self, name: str, interval: int) -> List[AlarmRecord]:
        async with self._lock:
            alarms = await self._read()
            alarm_id = self.id_factory()
            if any(a.id == alarm_id for a in alarms):
                raise RuntimeError(f"Generated alarm id {alarm_id} collides with an existing alarm")
            alarm = AlarmRecord(
                id=alarm_id,
                name=name,
                interval=interval,
                created_at=format_timestamp(self.clock()),
            )
            alarms.append(alarm)
            await self._write(alarms)
        logger.info("Alarm added %s (name=%s, interval=%s)", alarm.id, alarm.name, alarm.interval)
        return alarms

    async def update(self, alarm_id: str, name: str, interval: int, created_at: datetime) -> List[AlarmRecord]:
        started = format_timestamp(created_at)
        return await self._mutate(
            alarm_id,
            "update",
            lambda alarms: [
                replace(a, name=name, interval=interval, created_at=started) if a.id == alarm_id else a
                for a in alarms
            ],
        )

    async def reset(self, alarm_id: str) -> List[AlarmRecord]:
        def restart(alarms: List[AlarmRecord]) -> List[AlarmRecord]:
            started = format_timestamp(self.clock())
            return [replace(a, created_at=started) if a.id == alarm_id else a for a in alarms]

        return await self._mutate(alarm_id, "reset", restart)

    async def remove(self, alarm_id: str) -> List[AlarmRecord]:
        return await self._mutate(alarm_id, "remove", lambda alarms: [a for a in alarms if a.id != alarm_id])

    async def _mutate(
        self,
        alarm_id: str,
        action: str,
        transform: Callable[[List[AlarmRecord]], List[AlarmRecord]],
    ) -> List[AlarmRecord]:
        async with self._lock:
            alarms = await self._read()
            updated = transform(alarms)
            await self._write(updated)
        if any(a.id == alarm_id for a in alarms):
            logger.info("Alarm %s: %s", action, alarm_id)
        else:
            logger.debug("Alarm %s for missing id %s, collection unchanged", action, alarm_id)
        return updated

    async def _read(self) -> List[AlarmRecord]:
        try:
            payload = await self.storage.get_item(self.key)
        except Exception as exc:
            logger.error("Failed to read alarms (key=%s): %s", self.key, exc)
            raise StoreError(f"Failed to read alarms: {exc}") from exc
        return decode_collection(payload)

    async def _write(self, alarms: List[AlarmRecord]) -> None:
        try:
            payload = encode_collection(alarms)
            await self.storage.set_item(self.key, payload)
        except Exception as exc:
            logger.error("Failed to save alarms (key=%s): %s", self.key, exc)
            raise StoreError(f"Failed to save alarms: {exc}") from exc
