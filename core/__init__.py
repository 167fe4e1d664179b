"""Core (UI-agnostic) advising dashboard logic.

This package contains:
- record loading (Apps Script JSON -> pandas) and the record store
- grouped statistics per advisor, program and scholarship
- view state, filters and pagination
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
