from __future__ import annotations

from typing import Dict

from .validation import ValidationErrorKind

TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "en": {
        "my_alarms": "My Alarms",
        "no_alarms": "No alarms yet.",
        "start_date_label": "Start:",
        "remaining_days": "Remaining days:",
        "days": " days",
        "due": "DUE",
        "added": "Alarm added.",
        "updated": "Alarm updated.",
        "reset": "Alarm reset.",
        "deleted": "Alarm deleted.",
        "name_error": "Please enter alarm title.",
        "interval_error": "Interval must be a number greater than or equal to 1.",
        "store_error": "Could not save alarms:",
    },
    "ko": {
        "my_alarms": "내 알람",
        "no_alarms": "등록된 알람이 없습니다.",
        "start_date_label": "시작일:",
        "remaining_days": "남은 일수:",
        "days": "일",
        "due": "갱신 필요",
        "added": "알람이 등록되었습니다.",
        "updated": "알람이 수정되었습니다.",
        "reset": "알람이 갱신되었습니다.",
        "deleted": "알람이 삭제되었습니다.",
        "name_error": "알람 제목을 입력해 주세요.",
        "interval_error": "주기는 1 이상의 숫자여야 합니다.",
        "store_error": "알람을 저장하지 못했습니다:",
    },
}

_ERROR_KEYS = {
    ValidationErrorKind.EMPTY_NAME: "name_error",
    ValidationErrorKind.INVALID_INTERVAL: "interval_error",
}


def t(key: str, lang: str = "en") -> str:
    return TRANSLATIONS.get(lang, {}).get(key) or TRANSLATIONS["en"].get(key) or key


def error_message(kind: ValidationErrorKind, lang: str = "en") -> str:
    return t(_ERROR_KEYS[kind], lang)
