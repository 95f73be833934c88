"""Recurring alarm subsystem: persistence, progress math and list interaction."""

from .controller import AlarmListController, AlarmRow
from .interaction import InteractionPhase, RowEffect, RowEffectKind, RowInteraction
from .progress import AlarmProgress, calculate_progress
from .storage import AlarmRecord, AlarmStore, FileStorage, StoreError
from .validation import ValidationError, ValidationErrorKind, validate
