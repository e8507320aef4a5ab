# SPDX-License-Identifier: BSD-3-Clause
"""
Platform descriptions loaded from the project's YAML file.

The file holds a 'bin' table keyed by platform name:

    bin:
      riscv64-qemu:
        target: riscv64gc-unknown-none-elf
        configs:
          board: qemu
          driver: [kvirtio, ns16550a]

configs may also be a list of 'name' / 'name=value' strings.
"""

import logging
from pathlib import Path
from typing import Dict, NamedTuple, Optional

import yaml

from kbuild.common.arch import arch_from_target
from kbuild.common.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = 'byteos.yaml'


class Platform(NamedTuple):
    """A resolved entry of the platform table."""
    name: str
    target: str
    arch: str
    configs: Dict[str, Optional[str]]


def _config_value(name: str, value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return ','.join(str(v) for v in value)
    if isinstance(value, dict):
        raise ConfigurationError(f"Config switch '{name}' cannot be a mapping")
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def parse_configs(raw) -> Dict[str, Optional[str]]:
    """Normalize a platform's 'configs' entry to an ordered name -> value dict.

    A value of None marks a bare switch.
    """
    configs = {}
    if raw is None:
        return configs

    if isinstance(raw, dict):
        for name, value in raw.items():
            configs[str(name)] = _config_value(name, value)
        return configs

    if not isinstance(raw, list):
        raise ConfigurationError(f"'configs' must be a list or a mapping, got {type(raw).__name__}")

    for item in raw:
        if isinstance(item, dict):
            if len(item) != 1:
                raise ConfigurationError(f"Config entry {item!r} must have exactly one key")
            (name, value), = item.items()
            configs[str(name)] = _config_value(name, value)
        elif isinstance(item, str):
            name, sep, value = item.partition('=')
            configs[name.strip()] = value.strip().strip('"') if sep else None
        else:
            raise ConfigurationError(f"Invalid config entry {item!r}")

    return configs


class PlatformResolver:
    """Resolves platform names against a YAML platform file.

    The file is read on first use and kept for the lifetime of the resolver.
    """

    def __init__(self, config_path=DEFAULT_CONFIG_FILE):
        self.config_path = Path(config_path)
        self._platforms = None

    def load(self) -> dict:
        """Read and validate the platform table. Safe to call repeatedly."""
        if self._platforms is not None:
            return self._platforms

        try:
            text = self.config_path.read_text(encoding='utf-8')
        except OSError as e:
            raise ConfigurationError(f"Cannot read platform file {self.config_path}: {e}") from e

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"{self.config_path} must contain a mapping")

        platforms = data.get('bin')
        if not isinstance(platforms, dict):
            raise ConfigurationError(f"{self.config_path} has no 'bin' platform table")

        logger.debug(f"Loaded {len(platforms)} platform(s) from {self.config_path}")
        self._platforms = platforms
        return platforms

    def list_platforms(self) -> list:
        """Get platform names in file order."""
        return [str(name) for name in self.load()]

    def resolve(self, name: str) -> Platform:
        """Resolve a platform name into its target, architecture and switches."""
        platforms = self.load()
        if name not in platforms:
            raise ConfigurationError(f"Unknown platform: {name}. "
                                     f"Available: {self.list_platforms()}")

        entry = platforms[name]
        if not isinstance(entry, dict):
            raise ConfigurationError(f"Platform '{name}' must be a mapping")

        target = entry.get('target')
        if not isinstance(target, str) or not target:
            raise ConfigurationError(f"Platform '{name}' has no 'target' triple")

        return Platform(
            name=name,
            target=target,
            arch=arch_from_target(target),
            configs=parse_configs(entry.get('configs')),
        )
