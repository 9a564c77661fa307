# -*- coding: utf-8 -*-
"""
LocForge Core Package

Reconstruction, export, batch translation, terminology and storage.
"""
