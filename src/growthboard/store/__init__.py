"""Persistence capabilities behind the workspace.

- base: ExperimentStore interface
- memory: in-process store seeded with demo data (guest mode)
- sql: SQLAlchemy-backed store (live mode)
"""
