"""Config settings – 12-factor env-based configuration."""
from clinic_collections.config.settings.base import Settings
from clinic_collections.config.settings.collection import CollectionSettings
from clinic_collections.config.settings.factory import SettingsFactory
from clinic_collections.config.settings.loaders import DotenvSettingsLoader, EnvSettingsLoader, SettingsLoader

__all__ = [
    "CollectionSettings",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "Settings",
    "SettingsFactory",
    "SettingsLoader",
]
