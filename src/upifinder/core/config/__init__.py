"""
Settings for the archive scanner and its reports.
"""

from .settings import AuditSettings, SettingsLoader, load_settings

__all__ = [
    "AuditSettings",
    "SettingsLoader",
    "load_settings",
]
