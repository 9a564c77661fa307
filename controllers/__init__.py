# -*- coding: utf-8 -*-
"""
LocForge Controllers Package

Controllers coordinate parsers, the batch protocol and the models, and
report each operation as a Notification.
"""

from controllers.file_controller import FileController
from controllers.translation_controller import TranslationController

__all__ = [
    'FileController',
    'TranslationController',
]
