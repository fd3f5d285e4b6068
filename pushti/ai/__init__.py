# -*- coding: utf-8 -*-
"""Generative-AI gateway (calorie estimates, food guides, exercise plans, health tips)."""

from .gateway import AIConfigError, AIGateway, AIGatewayError, GatewaySettings

__all__ = [
    "AIConfigError",
    "AIGateway",
    "AIGatewayError",
    "GatewaySettings",
]
