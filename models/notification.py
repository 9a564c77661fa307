# -*- coding: utf-8 -*-
"""
User-visible outcome of one operation (file load, batch, export).
"""

from dataclasses import dataclass

from locforge_enums import NotificationType


@dataclass(frozen=True)
class Notification:
    type: NotificationType
    message: str
    count: int = 0

    @classmethod
    def success(cls, message: str, count: int = 0) -> 'Notification':
        return cls(NotificationType.SUCCESS, message, count)

    @classmethod
    def error(cls, message: str, count: int = 0) -> 'Notification':
        return cls(NotificationType.ERROR, message, count)

    @property
    def is_error(self) -> bool:
        return self.type == NotificationType.ERROR

    def __str__(self):
        return self.message
