"""taskgate: human-task orchestration for durable workflows."""
