"""Core experiment rules.

Pure functions over domain records:
- scoring: composite score, dimension values, legacy ICE sync
- lifecycle: create, validate, status/result, archive, complete, delete
- Forbidden: store calls, HTTP concerns
"""
