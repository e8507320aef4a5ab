# SPDX-License-Identifier: BSD-3-Clause
"""
Resolved inputs for one build or run invocation.

A BuildConfig is created once from the command line (and optionally a
platform entry) and handed to every stage; nothing mutates it afterwards.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional, Tuple

from kbuild.common.arch import get_arch_config
from kbuild.common.errors import ConfigurationError


DEFAULT_CFGS = {
    'root_fs': 'ext4_rs',
    'board': 'qemu',
    'driver': 'kramdisk',
}
DEFAULT_MOUNT_IMG = 'mount.img'
DEFAULT_HEAP_SIZE = '0x0180_0000'

KERNEL_NAME = 'kernel'
BIN_SUFFIX = '.bin'


class ArtifactPaths(NamedTuple):
    elf: Path
    bin: Path


def get_artifact_paths(workdir, target: str, release: bool) -> ArtifactPaths:
    """Get the kernel ELF and raw binary paths cargo and objcopy write to.

    <workdir>/target/<triple>/<release|debug>/kernel and the same path + '.bin'.
    """
    mode = 'release' if release else 'debug'
    elf = Path(workdir) / 'target' / target / mode / KERNEL_NAME
    return ArtifactPaths(elf=elf, bin=elf.with_name(elf.name + BIN_SUFFIX))


@dataclass(frozen=True)
class BuildConfig:
    """Everything one kernel build needs, derived from a single architecture."""

    arch: str
    target: str
    release: bool = True
    cfgs: Mapping[str, Optional[str]] = field(default_factory=lambda: dict(DEFAULT_CFGS))
    rustflags: Tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)
    workdir: str = field(default_factory=os.getcwd)
    mount_img: str = DEFAULT_MOUNT_IMG
    heap_size: str = DEFAULT_HEAP_SIZE
    log_level: Optional[str] = None

    def __post_init__(self):
        if 'board' in self.cfgs and self.cfgs['board'] is None:
            raise ConfigurationError("The 'board' switch needs a value (board=NAME)")
        object.__setattr__(self, 'cfgs', MappingProxyType(dict(self.cfgs)))
        object.__setattr__(self, 'env', MappingProxyType(dict(self.env)))

    @classmethod
    def from_arch(cls, arch: str, cfgs: dict = None, **kwargs) -> 'BuildConfig':
        """Create a config for arch using its default target triple.

        cfgs extends and overrides DEFAULT_CFGS.
        """
        arch_config = get_arch_config(arch)
        return cls(
            arch=arch,
            target=arch_config['target_triple'],
            cfgs={**DEFAULT_CFGS, **(cfgs or {})},
            **kwargs,
        )

    @classmethod
    def from_platform(cls, platform, cfgs: dict = None, **kwargs) -> 'BuildConfig':
        """Create a config from a resolved Platform.

        Precedence for switches: defaults, then the platform file, then cfgs.
        """
        get_arch_config(platform.arch)  # reject unsupported arches up front
        return cls(
            arch=platform.arch,
            target=platform.target,
            cfgs={**DEFAULT_CFGS, **platform.configs, **(cfgs or {})},
            **kwargs,
        )

    @property
    def arch_config(self) -> dict:
        return get_arch_config(self.arch)

    @property
    def mode(self) -> str:
        return 'release' if self.release else 'debug'

    @property
    def board(self) -> str:
        return self.cfgs.get('board') or DEFAULT_CFGS['board']

    @property
    def artifacts(self) -> ArtifactPaths:
        return get_artifact_paths(self.workdir, self.target, self.release)
