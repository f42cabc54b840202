"""Infrastructure: runtime, task providers, persistence and cache adapters."""
