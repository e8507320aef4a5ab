# SPDX-License-Identifier: BSD-3-Clause
"""
Cargo invocation for the kernel.

Turns a BuildConfig into RUSTFLAGS, build environment and cargo arguments,
then builds the kernel ELF for the configured target.
"""

import logging
import os
import subprocess
from pathlib import Path

from kbuild.common.config import ArtifactPaths, BuildConfig
from kbuild.common.errors import BuildFailure
from kbuild.common.utility import run_command

logger = logging.getLogger(__name__)


CARGO = 'cargo'

# Environment variable callers use to inject their own compiler flags
RUSTFLAGS_VAR = 'RUSTFLAGS'

# Required by the kernel's linking model
BASE_RUSTFLAGS = [
    '-Clink-arg=-no-pie',
    '-Cforce-frame-pointers=yes',
    '-Ztls-model=local-exec',
]


def format_cfg_flag(name: str, value: str = None) -> str:
    """Render a configuration switch as a rustc --cfg flag."""
    if value is None:
        return f'--cfg={name}'
    return f'--cfg={name}="{value}"'


class KernelBuilder:
    """Builds the kernel ELF with cargo."""

    def __init__(self, config: BuildConfig):
        self.config = config

    @property
    def artifacts(self) -> ArtifactPaths:
        return self.config.artifacts

    @property
    def elf_path(self) -> Path:
        return self.artifacts.elf

    @property
    def bin_path(self) -> Path:
        return self.artifacts.bin

    def get_rustflags(self, external: str = None) -> str:
        """Get the RUSTFLAGS value for this build.

        Args:
            external: Flags supplied by the caller; defaults to the
                current RUSTFLAGS environment variable

        Returns:
            external flags, then the baseline, extra and --cfg flags
        """
        if external is None:
            external = os.environ.get(RUSTFLAGS_VAR, '')

        flags = list(BASE_RUSTFLAGS)
        flags.extend(self.config.rustflags)
        for name, value in self.config.cfgs.items():
            flags.append(format_cfg_flag(name, value))

        derived = ' '.join(flags)
        external = external.strip()
        return f'{external} {derived}' if external else derived

    def get_build_env(self, external_rustflags: str = None) -> dict:
        """Get the variables this build sets on top of the caller's environment."""
        config = self.config
        env = {
            'ROOT_MANIFEST_DIR': str(config.workdir).rstrip('/') + '/',
            'MOUNT_IMG_PATH': config.mount_img,
            'HEAP_SIZE': config.heap_size,
            'BOARD': config.board,
        }
        if config.log_level:
            env['LOG'] = config.log_level
        env.update(config.env)
        env[RUSTFLAGS_VAR] = self.get_rustflags(external_rustflags)
        return env

    def get_cargo_args(self) -> list:
        """Get the cargo command line."""
        args = [CARGO, 'build']
        if self.config.release:
            args.append('--release')
        args.extend(['--target', self.config.target])
        return args

    def build(self) -> ArtifactPaths:
        """Run cargo and return the artifact paths.

        Raises:
            BuildFailure: cargo is missing or exited non-zero
        """
        cmd = self.get_cargo_args()
        env = self.get_build_env()
        logger.info(f"Building kernel for {self.config.target} ({self.config.mode})")
        logger.debug(f"RUSTFLAGS={env[RUSTFLAGS_VAR]}")

        try:
            run_command(cmd, env=env, cwd=str(self.config.workdir))
        except subprocess.CalledProcessError as e:
            raise BuildFailure(cmd, e.returncode) from e
        except FileNotFoundError as e:
            raise BuildFailure(cmd, 127, f'{CARGO} not found') from e

        logger.info(f"Kernel ELF: {self.elf_path}")
        return self.artifacts


def build_elf(config: BuildConfig) -> ArtifactPaths:
    """Build the kernel ELF described by config."""
    return KernelBuilder(config).build()
