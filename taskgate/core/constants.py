"""Core constants: cache key structure and shared literal values."""

# Cache key prefixes
CACHE_PREFIX_ROUND_ROBIN = "rr"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Task statuses counted as open work for load balancing
ACTIVE_TASK_STATUSES = ("pending", "assigned", "in_progress")

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR
MS_PER_WEEK = 7 * MS_PER_DAY
