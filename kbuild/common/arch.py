# SPDX-License-Identifier: BSD-3-Clause
"""
Architecture configuration for the kernel build scripts.

This module defines architecture-specific settings including:
- Rust target triples
- QEMU executables and machine arguments
- Virtio block device bus
- Whether QEMU boots the ELF or the raw binary
"""

from kbuild.common.errors import ConfigurationError


# Architecture configurations
ARCH_CONFIG = {
    'x86_64': {
        'target_triple': 'x86_64-unknown-none',
        'qemu_system': 'qemu-system-x86_64',
        'qemu_machine_args': ['-machine', 'q35', '-cpu', 'IvyBridge-v2'],
        'bus': 'pci',
        'boot_elf': True,
    },
    'aarch64': {
        'target_triple': 'aarch64-unknown-none-softfloat',
        'qemu_system': 'qemu-system-aarch64',
        'qemu_machine_args': ['-cpu', 'cortex-a72', '-machine', 'virt'],
        'bus': 'device',
        'boot_elf': False,
    },
    'riscv64': {
        'target_triple': 'riscv64gc-unknown-none-elf',
        'qemu_system': 'qemu-system-riscv64',
        'qemu_machine_args': ['-machine', 'virt'],
        'bus': 'device',
        'boot_elf': False,
    },
    'loongarch64': {
        'target_triple': 'loongarch64-unknown-none',
        'qemu_system': 'qemu-system-loongarch64',
        'qemu_machine_args': [],
        'bus': 'pci',
        'boot_elf': True,
    },
}

DEFAULT_ARCH = 'riscv64'


def get_arch_config(arch: str) -> dict:
    """Get architecture configuration by name."""
    if arch not in ARCH_CONFIG:
        raise ConfigurationError(f"Unsupported architecture: {arch}. "
                                 f"Supported: {list(ARCH_CONFIG.keys())}")
    return dict(ARCH_CONFIG[arch], arch=arch)


def get_supported_archs() -> list:
    """Get list of supported architectures."""
    return list(ARCH_CONFIG.keys())


def arch_from_target(target: str) -> str:
    """Derive the architecture id from a Rust target triple.

    The family is everything before the first '-', matched against the
    supported ids by prefix so that e.g. 'riscv64gc' and 'riscv64imac'
    both map to 'riscv64'.
    """
    family = target.split('-', 1)[0]
    if family in ARCH_CONFIG:
        return family

    for arch in ARCH_CONFIG:
        if family.startswith(arch):
            return arch

    raise ConfigurationError(f"Cannot derive a supported architecture from target '{target}'")
