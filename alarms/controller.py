from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Set, Union

from time_utils import now_utc

from .interaction import InteractionPhase, RowEffect, RowInteraction
from .progress import calculate_progress
from .storage import AlarmRecord, AlarmStore
from .validation import validate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlarmRow:
    record: AlarmRecord
    elapsed_days: int
    progress: float
    remaining_days: int
    is_due: bool
    is_revealed: bool = False
    is_editing: bool = False


def row_sort_key(row: AlarmRow):
    name = row.record.name
    return (row.remaining_days, name.casefold(), name, row.record.id)


class AlarmListController:
    """In-memory view of the alarm collection for a list screen.

    The controller never edits its snapshot by hand: every user action goes
    through ``AlarmStore`` and the collection it returns replaces the
    snapshot. Mutations from one controller run one at a time. Row
    exclusivity (one revealed or edited row) is delegated to ``RowInteraction``.
    """

    def __init__(
        self,
        store: AlarmStore,
        clock: Callable[[], datetime] = now_utc,
        on_row_effect: Optional[Callable[[RowEffect], None]] = None,
    ):
        self.store = store
        self.clock = clock
        self.on_row_effect = on_row_effect
        self.interaction = RowInteraction()
        self._alarms: List[AlarmRecord] = []
        self._pending_removals: Set[str] = set()
        self._mutation_lock = asyncio.Lock()

    async def activate(self) -> List[AlarmRow]:
        async with self._mutation_lock:
            alarms = await self.store.load_all()
            self._apply_snapshot(alarms)
        logger.info("Loaded %s alarms", len(self._alarms))
        return self.rows

    async def on_focus(self) -> List[AlarmRow]:
        return await self.activate()

    @property
    def alarms(self) -> List[AlarmRecord]:
        return [a for a in self._alarms if a.id not in self._pending_removals]

    @property
    def rows(self) -> List[AlarmRow]:
        now = self.clock()
        rows = []
        for alarm in self.alarms:
            progress = calculate_progress(alarm.started_at, alarm.interval, now)
            rows.append(
                AlarmRow(
                    record=alarm,
                    elapsed_days=progress.elapsed_days,
                    progress=progress.progress,
                    remaining_days=progress.remaining_days,
                    is_due=progress.is_due,
                    is_revealed=self.interaction.is_revealed(alarm.id),
                    is_editing=self.interaction.is_editing(alarm.id),
                )
            )
        rows.sort(key=row_sort_key)
        return rows

    @property
    def editing_record(self) -> Optional[AlarmRecord]:
        if self.interaction.phase is not InteractionPhase.EDITING:
            return None
        return self._find(self.interaction.active_row)

    def swipe_open(self, row_id: str) -> None:
        if self._find(row_id) is None:
            logger.warning("swipe_open on unknown alarm %s", row_id)
            return
        self._emit(self.interaction.swipe_open(row_id))

    def swipe_close(self, row_id: str) -> None:
        self._emit(self.interaction.swipe_close(row_id))

    def on_edit(self, row_id: str) -> Optional[AlarmRecord]:
        record = self._find(row_id)
        if record is None:
            logger.warning("Cannot edit unknown alarm %s", row_id)
            return None
        self._emit(self.interaction.choose_edit(row_id))
        return self.editing_record

    def on_edit_cancel(self) -> None:
        self._emit(self.interaction.cancel_edit())

    async def on_edit_submit(
        self, name: str, interval_text: Union[str, int], started_at: datetime
    ) -> List[AlarmRow]:
        if self.interaction.phase is not InteractionPhase.EDITING:
            logger.warning("Edit submitted with no edit session open, ignoring")
            return self.rows
        fields = validate(name, interval_text)
        row_id = self.interaction.active_row
        async with self._mutation_lock:
            alarms = await self.store.update(row_id, fields.name, fields.interval, started_at)
            self._apply_snapshot(alarms)
        if self.interaction.is_editing(row_id):
            self._emit(self.interaction.submit_edit())
        return self.rows

    async def on_add_submit(self, name: str, interval_text: Union[str, int]) -> List[AlarmRow]:
        fields = validate(name, interval_text)
        async with self._mutation_lock:
            alarms = await self.store.add(fields.name, fields.interval)
            self._apply_snapshot(alarms)
        return self.rows

    async def on_reset(self, row_id: str) -> List[AlarmRow]:
        async with self._mutation_lock:
            alarms = await self.store.reset(row_id)
            self._apply_snapshot(alarms)
        return self.rows

    async def on_delete(self, row_id: str) -> List[AlarmRow]:
        self._emit(self.interaction.delete(row_id))
        self._pending_removals.add(row_id)
        try:
            async with self._mutation_lock:
                alarms = await self.store.remove(row_id)
                self._apply_snapshot(alarms)
        finally:
            self._pending_removals.discard(row_id)
        return self.rows

    def _find(self, row_id: Optional[str]) -> Optional[AlarmRecord]:
        for alarm in self.alarms:
            if alarm.id == row_id:
                return alarm
        return None

    def _apply_snapshot(self, alarms: Iterable[AlarmRecord]) -> None:
        self._alarms = list(alarms)
        active = self.interaction.active_row
        if active is not None and self._find(active) is None:
            logger.info("Alarm %s disappeared, closing its row", active)
            self.interaction.forget(active)

    def _emit(self, effects: List[RowEffect]) -> None:
        for effect in effects:
            logger.debug("Row effect %s on %s", effect.kind.value, effect.row_id)
            if self.on_row_effect:
                self.on_row_effect(effect)
