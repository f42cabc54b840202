"""Application use cases (workflow-facing operations)."""
