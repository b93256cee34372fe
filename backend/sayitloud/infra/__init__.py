"""Infrastructure adapters (redis, auth)."""
