"""Tiering, orchestration, score merging and draft helpers."""
