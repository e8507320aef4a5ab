# SPDX-License-Identifier: BSD-3-Clause
"""
Build and run pipelines.

Stages run strictly in order and each one must succeed before the next
starts: cargo build, then rust-objcopy, then (for run) QEMU.
"""

import logging

from kbuild.base.objcopy import convert_to_binary
from kbuild.base.qemu import QemuRunner
from kbuild.base.toolchain import KernelBuilder
from kbuild.common.config import ArtifactPaths, BuildConfig

logger = logging.getLogger(__name__)


def build_kernel(config: BuildConfig) -> ArtifactPaths:
    """Build the kernel ELF and convert it to a raw binary.

    Raises:
        BuildFailure: cargo failed; objcopy is not run
        ConversionFailure: rust-objcopy failed
    """
    artifacts = KernelBuilder(config).build()
    convert_to_binary(artifacts.elf, config.arch)
    logger.info(f"Kernel binary: {artifacts.bin}")
    return artifacts


def run_kernel(config: BuildConfig, **qemu_options) -> int:
    """Build the kernel and boot it in QEMU.

    qemu_options are passed to QemuRunner (memory, smp, gdb, extra_args).

    Returns:
        QEMU exit code
    """
    artifacts = build_kernel(config)
    runner = QemuRunner(config, **qemu_options)
    return runner.run(artifacts)
