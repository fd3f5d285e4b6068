# -*- coding: utf-8 -*-
"""Analytics module (chart aggregation and dashboard figures)."""
