# -*- coding: utf-8 -*-

"""
Per-user index of the audience profiles set up on this machine.

Each profile keeps its full configuration in an `AudienceProfile.yaml`
file inside its base folder. The registry only maps profile names to
those files, together with the store each profile works on, so that
`list-profiles` can describe them without opening every file.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional

import platformdirs

from .misc import read_yaml, write_yaml


APP_NAME = "audience-batch-manager"
REGISTRY_FILE_NAME = "profiles_registry.yaml"

# Global registry instance
_registry = None


class RegisteredProfile(NamedTuple):
    """Registry entry of a profile, as shown by `list-profiles`."""
    name: str
    config_path: str
    store: str
    target: str
    updated_at: str

    @property
    def config_exists(self) -> bool:
        return Path(self.config_path).exists()


def store_target(config: Dict) -> str:
    """Spreadsheet id or workbook folder a profile reads and writes."""
    if config.get('store') == 'csv':
        return str(config.get('workbook_folder') or '')
    return str(config.get('spreadsheet_id') or '')


class ProfileRegistry:
    """Registry of profile configuration files, stored as YAML in the user config dir."""

    def __init__(self, registry_path: Optional[Path] = None):
        if registry_path is None:
            registry_path = Path(platformdirs.user_config_dir(APP_NAME, APP_NAME)) / REGISTRY_FILE_NAME
        self.registry_path = Path(registry_path)

    def _load(self) -> Dict[str, Dict]:
        return read_yaml(self.registry_path, default={}).get('profiles') or {}

    def _save(self, profiles: Dict[str, Dict]) -> None:
        write_yaml({'profiles': profiles}, self.registry_path)

    def register_profile(self, config: Dict, config_path: str) -> RegisteredProfile:
        """
        Add or refresh the entry of a profile.

        Args:
            config (dict): Profile configuration, as saved in its profile file.
            config_path (str): Path of the profile file.
        """
        profiles = self._load()
        name = config['profile']
        profiles[name] = {
            'config_path': str(Path(config_path).resolve()),
            'store': config.get('store', 'sheets'),
            'target': store_target(config),
            'updated_at': config.get('updated_at') or datetime.now().isoformat(),
        }
        self._save(profiles)
        logging.debug(f"Registered profile '{name}' in {self.registry_path}")
        return RegisteredProfile(name=name, **profiles[name])

    def get_profile_config(self, profile_name: str) -> Optional[Dict]:
        """
        Load the configuration of a profile.

        Returns:
            dict: The profile configuration, None if the profile is not
            registered or its profile file is gone.
        """
        entry = self._load().get(profile_name)
        if entry is None:
            return None
        config = read_yaml(entry['config_path'])
        if config is None:
            logging.warning(f"Profile file of '{profile_name}' no longer exists: {entry['config_path']}")
        return config

    def list_profiles(self) -> List[RegisteredProfile]:
        """Registered profiles sorted by name."""
        return [
            RegisteredProfile(name=name, **entry)
            for name, entry in sorted(self._load().items())
        ]

    def unregister_profile(self, profile_name: str) -> bool:
        """Remove a profile from the registry. Its files are left untouched."""
        profiles = self._load()
        if profiles.pop(profile_name, None) is None:
            return False
        self._save(profiles)
        logging.debug(f"Unregistered profile '{profile_name}'")
        return True

    def cleanup_orphaned_profiles(self) -> List[str]:
        """Remove the profiles whose profile file no longer exists, returning their names."""
        profiles = self._load()
        orphaned = [
            name for name, entry in profiles.items()
            if not Path(entry['config_path']).exists()
        ]
        if orphaned:
            self._save({name: entry for name, entry in profiles.items() if name not in orphaned})
        return orphaned


def get_registry() -> ProfileRegistry:
    """Get the global profile registry instance."""
    global _registry
    if _registry is None:
        _registry = ProfileRegistry()
    return _registry
