# -*- coding: utf-8 -*-
"""Profiles module (multi-profile store, daily logs, exercise checklist)."""
