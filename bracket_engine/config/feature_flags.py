"""
Feature Flags and runtime settings

All values are loaded from environment variables (optionally via .env).
"""
import os


def get_bool_env(key: str, default: bool = False) -> bool:
    """Get a boolean value from environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ('true', '1', 'yes', 'on', 'enabled')


class FeatureFlags:
    """
    Feature flags for the bracket engine.

    The live read endpoint is always on; the write-side endpoints are
    opt-in because they mutate nodes, games and picks.
    """

    # Admin: seed a tournament's bracket structure
    FEATURE_BRACKET_ADMIN: bool = get_bool_env('FEATURE_BRACKET_ADMIN', False)

    # Workers: push live scores and run pick resolution
    FEATURE_LIVE_INGEST_WORKER: bool = get_bool_env('FEATURE_LIVE_INGEST_WORKER', False)

    @classmethod
    def get_all_flags(cls) -> dict:
        """Get all feature flags as a dictionary."""
        return {
            key: value
            for key, value in cls.__dict__.items()
            if not key.startswith('_') and isinstance(value, bool)
        }


# Requests per client on GET /api/bracket/live (slowapi limit string)
LIVE_RATE_LIMIT: str = os.getenv("LIVE_RATE_LIMIT", "120/minute")


feature_flags = FeatureFlags()
