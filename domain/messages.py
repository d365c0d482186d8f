"""Localized user-facing loading messages."""

from __future__ import annotations

import logging

from domain.models import MessageContext

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "vi"

_CONTEXT_MESSAGES: dict[str, dict[MessageContext, str]] = {
    "vi": {
        MessageContext.APPOINTMENT: "Đang tải thông tin lịch hẹn...",
        MessageContext.DOCTOR: "Đang tải thông tin bác sĩ...",
        MessageContext.SERVICE: "Đang tải dịch vụ y tế...",
        MessageContext.DEPARTMENT: "Đang tải thông tin khoa...",
        MessageContext.GENERAL: "Đang tải...",
    },
    "en": {
        MessageContext.APPOINTMENT: "Loading appointment details...",
        MessageContext.DOCTOR: "Loading doctor details...",
        MessageContext.SERVICE: "Loading medical services...",
        MessageContext.DEPARTMENT: "Loading department details...",
        MessageContext.GENERAL: "Loading...",
    },
}

_TIMEOUT_MESSAGES = {
    "vi": "Thời gian tải quá lâu. Vui lòng thử lại.",
    "en": "Loading took too long. Please try again.",
}

_SYSTEM_ERROR_MESSAGES = {
    "vi": "Lỗi hệ thống. Vui lòng thử lại.",
    "en": "System error. Please try again.",
}


def supported_locales() -> list[str]:
    return sorted(_CONTEXT_MESSAGES)


def _resolve(locale: str) -> str:
    if locale in _CONTEXT_MESSAGES:
        return locale
    logger.debug("Unknown locale %r; falling back to %r", locale, DEFAULT_LOCALE)
    return DEFAULT_LOCALE


def default_message(context: MessageContext = MessageContext.GENERAL, locale: str = DEFAULT_LOCALE) -> str:
    catalogue = _CONTEXT_MESSAGES[_resolve(locale)]
    return catalogue.get(MessageContext(context), catalogue[MessageContext.GENERAL])


def stage_message(stage: str, context: MessageContext = MessageContext.GENERAL, locale: str = DEFAULT_LOCALE) -> str:
    return f"{default_message(context, locale)} - {stage}"


def timeout_message(locale: str = DEFAULT_LOCALE) -> str:
    return _TIMEOUT_MESSAGES[_resolve(locale)]


def system_error_message(locale: str = DEFAULT_LOCALE) -> str:
    return _SYSTEM_ERROR_MESSAGES[_resolve(locale)]
