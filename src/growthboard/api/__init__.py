"""API module for Growthboard.

The api layer validates inputs, delegates to the workspace and returns
payloads for the UI. Scoring, aggregation and lifecycle rules live in
the core and aggregation packages.
"""
