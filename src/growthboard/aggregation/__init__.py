"""Aggregation module for board analytics.

Reads experiments and produces summaries (metric averages, win rate, velocity).
- Forbidden: experiment mutation, store calls
"""
