from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

logger = logging.getLogger(__name__)


class InteractionPhase(Enum):
    IDLE = "idle"
    ROW_REVEALED = "row_revealed"
    EDITING = "editing"


class RowEffectKind(Enum):
    CLOSE_ROW = "close_row"
    RESTORE_FOCUS = "restore_focus"


@dataclass(frozen=True)
class InteractionState:
    phase: InteractionPhase
    row_id: Optional[str] = None


@dataclass(frozen=True)
class RowEffect:
    kind: RowEffectKind
    row_id: str


IDLE = InteractionState(InteractionPhase.IDLE)


class RowInteraction:
    """Tracks which single list row is revealed or being edited.

    Each event method moves the machine and returns the effects the view
    has to apply to its rows (closing the previously open row, giving focus
    back to the row whose edit was cancelled). Events that make no sense in
    the current state are ignored.
    """

    def __init__(self) -> None:
        self.state = IDLE

    @property
    def phase(self) -> InteractionPhase:
        return self.state.phase

    @property
    def active_row(self) -> Optional[str]:
        return self.state.row_id

    def is_revealed(self, row_id: str) -> bool:
        return self.state == InteractionState(InteractionPhase.ROW_REVEALED, row_id)

    def is_editing(self, row_id: str) -> bool:
        return self.state == InteractionState(InteractionPhase.EDITING, row_id)

    def swipe_open(self, row_id: str) -> List[RowEffect]:
        if self.phase is InteractionPhase.EDITING:
            self._ignore("swipe_open", row_id)
            return []
        effects = self._close_other(row_id)
        self._move(InteractionState(InteractionPhase.ROW_REVEALED, row_id))
        return effects

    def swipe_close(self, row_id: str) -> List[RowEffect]:
        if not self.is_revealed(row_id):
            self._ignore("swipe_close", row_id)
            return []
        self._move(IDLE)
        return []

    def choose_edit(self, row_id: str) -> List[RowEffect]:
        if self.phase is InteractionPhase.EDITING:
            self._ignore("choose_edit", row_id)
            return []
        effects = self._close_other(row_id)
        self._move(InteractionState(InteractionPhase.EDITING, row_id))
        return effects

    def submit_edit(self) -> List[RowEffect]:
        return self._finish_edit("submit_edit", cancelled=False)

    def cancel_edit(self) -> List[RowEffect]:
        return self._finish_edit("cancel_edit", cancelled=True)

    def delete(self, row_id: str) -> List[RowEffect]:
        effects = self._close_other(row_id)
        self._move(IDLE)
        return effects

    def forget(self, row_id: str) -> None:
        # The row vanished from the collection underneath us.
        if self.active_row == row_id:
            self._move(IDLE)

    def _finish_edit(self, event: str, cancelled: bool) -> List[RowEffect]:
        if self.phase is not InteractionPhase.EDITING:
            self._ignore(event, None)
            return []
        row_id = self.active_row
        self._move(IDLE)
        effects = [RowEffect(RowEffectKind.CLOSE_ROW, row_id)]
        if cancelled:
            effects.append(RowEffect(RowEffectKind.RESTORE_FOCUS, row_id))
        return effects

    def _close_other(self, row_id: str) -> List[RowEffect]:
        current = self.active_row
        if current is not None and current != row_id:
            return [RowEffect(RowEffectKind.CLOSE_ROW, current)]
        return []

    def _move(self, new_state: InteractionState) -> None:
        if new_state != self.state:
            logger.debug("Row interaction %s -> %s", self.state, new_state)
        self.state = new_state

    def _ignore(self, event: str, row_id: Optional[str]) -> None:
        logger.debug("Ignoring %s(%s) in state %s", event, row_id, self.state)
