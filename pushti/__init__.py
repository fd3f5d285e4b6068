# -*- coding: utf-8 -*-
"""Pushti: bilingual (Bengali/English) nutrition and health tracker backend."""

__version__ = "0.1.0"
