"""Shared process-level helpers."""
