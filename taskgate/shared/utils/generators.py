"""ID generators (CUID2) for tasks and workflow runs."""

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_task_id() -> str:
    """Return a new task id (``task_`` + CUID2)."""
    return f"task_{generate_cuid()}"


def generate_run_id() -> str:
    """Return a new workflow run id (``run_`` + CUID2)."""
    return f"run_{generate_cuid()}"
