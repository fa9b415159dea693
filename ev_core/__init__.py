"""Core (UI-agnostic) analytics engine for the EV population dashboard.

This package contains:
- record normalization (raw rows -> typed record frame)
- filter normalization and evaluation
- grouping/reduction and ranking helpers
- view compute functions (JSON-serializable payloads)
- a reactive dashboard session
"""
