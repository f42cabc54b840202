"""Shared cross-cutting code: telemetry and utilities."""
