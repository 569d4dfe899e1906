"""
설정 패키지

settings.yaml 로드 및 Settings 싱글턴
"""

from core.config.loader import (
    AppSettings,
    Settings,
    SettingsLoadError,
    get_settings,
    load_settings,
)

__all__ = [
    "AppSettings",
    "Settings",
    "SettingsLoadError",
    "get_settings",
    "load_settings",
]
