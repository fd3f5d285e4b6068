# -*- coding: utf-8 -*-
"""
Sync module
"""
