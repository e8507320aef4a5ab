# SPDX-License-Identifier: BSD-3-Clause
"""
QEMU emulator launcher for the kernel.

Builds the per-architecture QEMU command line and runs it in the
foreground with the console attached to the terminal.
"""

import logging
import subprocess

from kbuild.common.arch import ARCH_CONFIG
from kbuild.common.config import ArtifactPaths, BuildConfig
from kbuild.common.utility import format_command

logger = logging.getLogger(__name__)


# Default QEMU settings
DEFAULT_MEMORY = '1G'
DEFAULT_SMP = 1
QEMU_LOG = 'qemu.log'
QEMU_LOG_ITEMS = 'in_asm,int,pcall,cpu_reset,guest_errors'
DRIVE_ID = 'x0'


def get_machine_args(arch: str) -> list:
    """Get the machine/CPU arguments for arch, or [] if it is unknown."""
    arch_config = ARCH_CONFIG.get(arch)
    if arch_config is None:
        return []
    return list(arch_config['qemu_machine_args'])


def get_bus(arch: str) -> str:
    """Get the bus the virtio block device is attached to."""
    arch_config = ARCH_CONFIG.get(arch)
    if arch_config is None:
        return 'device'
    return arch_config['bus']


def get_kernel_image(arch: str, artifacts: ArtifactPaths):
    """Pick the ELF or the raw binary, whichever arch boots from."""
    arch_config = ARCH_CONFIG.get(arch)
    if arch_config is not None and arch_config['boot_elf']:
        return artifacts.elf
    return artifacts.bin


def get_drive_args(image_path: str, bus: str) -> list:
    """Attach image_path as a raw virtio block device on bus."""
    return [
        '-drive', f'file={image_path},if=none,format=raw,id={DRIVE_ID}',
        '-device', f'virtio-blk-{bus},drive={DRIVE_ID}',
    ]


class QemuRunner:
    """Runs a built kernel in QEMU."""

    def __init__(self, config: BuildConfig, memory: str = DEFAULT_MEMORY,
                 smp: int = DEFAULT_SMP, gdb: bool = False, extra_args: list = None):
        """
        Args:
            config: Build configuration the kernel was built with
            memory: Memory size (e.g., '1G', '512M')
            smp: Number of CPU cores
            gdb: Start a GDB stub on tcp::1234 and freeze the CPU at startup
            extra_args: Additional QEMU arguments appended last
        """
        self.config = config
        self.memory = memory
        self.smp = smp
        self.gdb = gdb
        self.extra_args = list(extra_args or [])

    @property
    def executable(self) -> str:
        return self.config.arch_config['qemu_system']

    @property
    def bus(self) -> str:
        return get_bus(self.config.arch)

    def get_args(self, artifacts: ArtifactPaths = None) -> list:
        """Get the full QEMU command line, executable included."""
        arch = self.config.arch
        artifacts = artifacts or self.config.artifacts

        args = [self.executable]
        args.extend(get_machine_args(arch))
        args.extend(['-kernel', str(get_kernel_image(arch, artifacts))])
        args.extend([
            '-m', self.memory,
            '-nographic',
            '-smp', str(self.smp),
            '-D', QEMU_LOG,
            '-d', QEMU_LOG_ITEMS,
        ])
        args.extend(get_drive_args(self.config.mount_img, self.bus))

        if self.gdb:
            args.extend(['-s', '-S'])

        args.extend(self.extra_args)
        return args

    def run(self, artifacts: ArtifactPaths = None) -> int:
        """Run QEMU until it exits.

        Returns:
            QEMU exit code
        """
        args = self.get_args(artifacts)
        logger.info(f"Running: {format_command(args)}")
        if self.gdb:
            logger.info("Waiting for GDB on tcp::1234")

        try:
            returncode = subprocess.call(args, cwd=str(self.config.workdir))
        except FileNotFoundError:
            logger.error(f"{self.executable} not found")
            return 127

        if returncode != 0:
            logger.warning(f"QEMU exited with code {returncode}")
        return returncode


def launch(config: BuildConfig, artifacts: ArtifactPaths = None, **kwargs) -> int:
    """Run the kernel built for config in QEMU and return its exit code."""
    return QemuRunner(config, **kwargs).run(artifacts)
