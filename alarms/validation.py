from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Union

MAX_NAME_LENGTH = 50

_INTERVAL_RE = re.compile(r"^\s*\+?(\d+)\s*$")


class ValidationErrorKind(Enum):
    EMPTY_NAME = "empty_name"
    INVALID_INTERVAL = "invalid_interval"


class ValidationError(ValueError):
    def __init__(self, kinds: Tuple[ValidationErrorKind, ...]):
        self.kinds = kinds
        super().__init__(", ".join(k.value for k in kinds))

    @property
    def kind(self) -> ValidationErrorKind:
        return self.kinds[0]


@dataclass(frozen=True)
class AlarmFields:
    name: str
    interval: int


def normalize_name(name: str) -> str:
    return name.strip()[:MAX_NAME_LENGTH].strip()


def parse_interval(interval_text: Union[str, int]) -> int | None:
    if isinstance(interval_text, bool):
        return None
    if isinstance(interval_text, int):
        value = interval_text
    elif isinstance(interval_text, str):
        match = _INTERVAL_RE.match(interval_text)
        if not match:
            return None
        try:
            value = int(match.group(1))
        except ValueError:
            # digit strings past the interpreter's int conversion limit
            return None
    else:
        return None
    return value if value >= 1 else None


def collect_errors(name: str, interval_text: Union[str, int]) -> List[ValidationErrorKind]:
    errors: List[ValidationErrorKind] = []
    if not isinstance(name, str) or not normalize_name(name):
        errors.append(ValidationErrorKind.EMPTY_NAME)
    if parse_interval(interval_text) is None:
        errors.append(ValidationErrorKind.INVALID_INTERVAL)
    return errors


def validate(name: str, interval_text: Union[str, int]) -> AlarmFields:
    """Check form input for an alarm and return the cleaned values.

    The add and edit paths both go through here. Raises ``ValidationError``
    listing every failing field; ``kind`` is the first one (name before interval).
    """
    errors = collect_errors(name, interval_text)
    interval = parse_interval(interval_text)
    if errors or interval is None:
        raise ValidationError(tuple(errors))
    return AlarmFields(name=normalize_name(name), interval=interval)
