# -*- coding: utf-8 -*-
"""
LocForge Models Package

Data models for extracted entries, loaded files and the session workspace.
"""

from models.entry import Entry
from models.notification import Notification
from models.parsed_file import ParsedFile
from models.project_model import ProjectModel

__all__ = ['Entry', 'Notification', 'ParsedFile', 'ProjectModel']
