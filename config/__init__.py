import os

_ALIASES = {
    "prod": "config.production",
    "production": "config.production",
    "test": "config.testing",
    "testing": "config.testing",
}


def get_settings_module() -> str:
    """Dotted path of the settings module selected by APP_ENV (development by default)."""
    return _ALIASES.get(os.getenv("APP_ENV", "development").strip().lower(), "config.development")
