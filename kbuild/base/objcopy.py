# SPDX-License-Identifier: BSD-3-Clause
"""
ELF to raw binary conversion with rust-objcopy.
"""

import logging
from pathlib import Path

import sh

from kbuild.common.config import BIN_SUFFIX
from kbuild.common.errors import ConversionFailure
from kbuild.common.utility import format_command

logger = logging.getLogger(__name__)


OBJCOPY = 'rust-objcopy'


def get_bin_path(elf_path) -> Path:
    """Get the raw binary path derived from an ELF path."""
    elf_path = Path(elf_path)
    return elf_path.with_name(elf_path.name + BIN_SUFFIX)


def get_objcopy_args(elf_path, arch: str) -> list:
    """Get rust-objcopy arguments for stripping elf_path into a flat binary."""
    return [
        f'--binary-architecture={arch}',
        str(elf_path),
        '--strip-all',
        '-O', 'binary',
        str(get_bin_path(elf_path)),
    ]


def convert_to_binary(elf_path, arch: str) -> Path:
    """Convert the kernel ELF into a symbol-stripped raw binary.

    Args:
        elf_path: Kernel ELF produced by cargo
        arch: Architecture id passed as --binary-architecture

    Returns:
        Path of the raw binary (ELF path + '.bin')

    Raises:
        ConversionFailure: rust-objcopy is missing or exited non-zero
    """
    args = get_objcopy_args(elf_path, arch)
    cmd = [OBJCOPY] + args
    logger.info(f"$ {format_command(cmd)}")

    try:
        objcopy = sh.Command(OBJCOPY)
        objcopy(*args)
    except sh.CommandNotFound as e:
        raise ConversionFailure(cmd, 127, f'{OBJCOPY} not found') from e
    except sh.ErrorReturnCode as e:
        stderr = e.stderr.decode(errors='replace').strip() if e.stderr else None
        raise ConversionFailure(cmd, e.exit_code, stderr) from e

    return get_bin_path(elf_path)
