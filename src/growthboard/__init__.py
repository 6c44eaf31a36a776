"""Growthboard: growth-experiment boards with ICE scoring, a learnings vault and analytics."""

__version__ = "0.1.0"
