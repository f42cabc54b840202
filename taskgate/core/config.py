"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Backend selections (database, round-robin cursor)
are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    Everything has a default so the in-process runtime works without
    any environment; postgres and redis backends add their own required
    fields (see validate_backends).
    """

    # App
    app_name: str = "taskgate"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database: "memory" (no SQL, in-process group directory) or "postgres"
    database_backend: str = "memory"
    database_url: str = ""
    database_echo: bool = False
    db_pool_size: int | None = None
    db_max_overflow: int | None = None

    # Redis (durable round-robin cursor when round_robin_backend is "redis")
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    round_robin_backend: str = "memory"
    round_robin_key_prefix: str = "taskgate"

    # Task activities retry policy (create/reassign/notify/escalate/cancel)
    activity_max_attempts: int = 3
    activity_initial_interval_seconds: float = 1.0
    activity_max_interval_seconds: float = 10.0
    activity_backoff_coefficient: float = 2.0

    # Escalation: group used when an escalate breach has no configured target.
    # Empty means escalate without a target.
    default_escalation_group: str = ""
    breach_notify_message: str = "Task SLA has been breached"
    breach_cancel_reason: str = "SLA breached"

    # Signal names delivered by the task provider
    signal_task_completed: str = "taskCompleted"
    signal_task_cancelled: str = "taskCancelled"

    # In-process runtime: unclaimed signals buffered per name, finished runs kept for status
    signal_inbox_limit: int = 1000
    finished_workflow_retention: int = 1000

    # OpenTelemetry (spans are no-ops unless an SDK is configured by the host)
    telemetry_enabled: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_backends(self) -> "Settings":
        """Validate backend selections.

        - Postgres: DATABASE_URL required.
        - Retry policy: at least one attempt, positive intervals.
        - Runtime: a non-empty signal inbox, non-negative retention.
        """
        if self.database_backend == "postgres":
            if not self.database_url:
                raise ValueError(
                    "DATABASE_URL is required when database_backend is 'postgres'. "
                    "Set in environment or .env file."
                )
        elif self.database_backend != "memory":
            raise ValueError(
                f"database_backend must be 'memory' or 'postgres', got: {self.database_backend!r}"
            )
        if self.round_robin_backend not in ("memory", "redis"):
            raise ValueError(
                f"round_robin_backend must be 'memory' or 'redis', got: {self.round_robin_backend!r}"
            )
        if self.activity_max_attempts < 1:
            raise ValueError("activity_max_attempts must be at least 1")
        if self.activity_initial_interval_seconds <= 0 or self.activity_max_interval_seconds <= 0:
            raise ValueError("activity retry intervals must be positive")
        if self.signal_inbox_limit < 1 or self.finished_workflow_retention < 0:
            raise ValueError(
                "signal_inbox_limit must be at least 1 and "
                "finished_workflow_retention must be non-negative"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (loaded once from env/.env)."""
    return Settings()
