"""Settings override used by the test suite.

Entrypoints resolve their Settings through get_settings(); tests swap in a
Settings pointing at a temporary database instead of touching the
environment. Not for production code.
"""

import sensorhub.lib.config.settings as _settings_module
from sensorhub.lib.config.settings import Settings, _load_settings


def set_settings(settings: Settings | None) -> None:
    """Make get_settings() return `settings`, or the environment when None."""
    _settings_module._settings_override = settings
    _load_settings.cache_clear()
