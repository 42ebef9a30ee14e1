from arcade_backend.config.feature_flags import feature_flags, get_bool_env
from arcade_backend.config.settings import settings, Settings

__all__ = ["feature_flags", "get_bool_env", "settings", "Settings"]
