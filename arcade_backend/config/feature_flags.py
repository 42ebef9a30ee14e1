"""
Feature Flags Configuration

Centralized feature flag management for the backend.
All feature flags are loaded from environment variables.
"""
import os


def get_bool_env(key: str, default: bool = False) -> bool:
    """Get a boolean value from environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ('true', '1', 'yes', 'on', 'enabled')


class FeatureFlags:
    """
    Feature flags for the application.

    To add a new feature flag:
    1. Add it here as a class property
    2. Load it from environment variable
    3. Use it in your code
    """

    # Relay new personal bests to the tournament contract (submitScore)
    FEATURE_TOURNAMENT_SCORE_RELAY: bool = get_bool_env('FEATURE_TOURNAMENT_SCORE_RELAY', False)

    # In-process periodic reconcile loop (alternative to an external cron)
    FEATURE_BACKGROUND_RECONCILER: bool = get_bool_env('FEATURE_BACKGROUND_RECONCILER', False)

    # Scheduled run creates the successor when it finds a finalized tournament
    RECONCILER_AUTO_CREATE_SUCCESSOR: bool = get_bool_env('RECONCILER_AUTO_CREATE_SUCCESSOR', False)

    @classmethod
    def is_enabled(cls, flag_name: str) -> bool:
        """Check if a feature flag is enabled by name."""
        return getattr(cls, flag_name, False)

    @classmethod
    def get_all_flags(cls) -> dict:
        """Get all feature flags as a dictionary."""
        return {
            key: value
            for key, value in cls.__dict__.items()
            if not key.startswith('_') and isinstance(value, bool)
        }


# Singleton instance for easy importing
feature_flags = FeatureFlags()
