"""User-facing notices (toasts / blocking alerts) raised by the editor."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


_LOG_LEVELS = {
    NoticeLevel.INFO: logging.INFO,
    NoticeLevel.SUCCESS: logging.INFO,
    NoticeLevel.ERROR: logging.WARNING,
}


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str
    title: str = ""
    blocking: bool = False


class NoticeSink:
    """Collects notices for the host UI to display and logs each one.

    Hosts may subclass and override :meth:`emit` to forward notices to a
    real toast widget.
    """

    def __init__(self) -> None:
        self.notices: list[Notice] = []

    def emit(self, notice: Notice) -> None:
        self.notices.append(notice)
        logger.log(_LOG_LEVELS[notice.level], "%s%s", f"{notice.title}: " if notice.title else "", notice.message)

    def error(self, message: str, title: str = "Error", blocking: bool = True) -> None:
        self.emit(Notice(NoticeLevel.ERROR, message, title, blocking))

    def success(self, message: str, title: str = "Done") -> None:
        self.emit(Notice(NoticeLevel.SUCCESS, message, title))

    def info(self, message: str, title: str = "") -> None:
        self.emit(Notice(NoticeLevel.INFO, message, title))

    @property
    def last(self) -> Notice | None:
        return self.notices[-1] if self.notices else None

    def clear(self) -> None:
        self.notices.clear()
