# SPDX-License-Identifier: BSD-3-Clause
"""
Utility functions for the kernel build scripts.
"""

from decimal import Decimal
import logging
import os
import re
import shlex
import subprocess

logger = logging.getLogger(__name__)


def parse_size(size: str) -> int:
    """Parse a size string into bytes.

    Accepts a hex literal with optional '_' separators (0x0180_0000) or a
    decimal number with an optional k/m/g suffix (24M).
    """
    size = size.strip()
    if size.lower().startswith('0x'):
        try:
            return int(size[2:].replace('_', ''), 16)
        except ValueError:
            raise ValueError(f'Invalid size {size}') from None

    size_match = re.fullmatch(r'([0-9]+(?:\.[0-9]+)?)([kmg]?)', size, re.IGNORECASE)
    if size_match is None:
        raise ValueError(f'Invalid size {size}')

    result = Decimal(size_match.group(1))
    multiplier = size_match.group(2).lower()

    multipliers = {'k': 1024, 'm': 1024**2, 'g': 1024**3}
    if multiplier in multipliers:
        result *= multipliers[multiplier]

    return int(result)


def format_hex_literal(value: int, width: int = 8) -> str:
    """Format an integer as a Rust hex literal grouped by 4 digits (0x0180_0000)."""
    digits = f'{value:0{width}x}'
    head = len(digits) % 4
    groups = [digits[:head]] if head else []
    groups += [digits[i:i + 4] for i in range(head, len(digits), 4)]
    return '0x' + '_'.join(groups)


def format_command(cmd: list) -> str:
    """Render a command list the way a shell would need it typed."""
    return ' '.join(shlex.quote(str(part)) for part in cmd)


def run_command(cmd: list, env: dict = None, cwd: str = None,
                check: bool = True) -> subprocess.CompletedProcess:
    """Run a command with logging.

    env is merged over the caller's environment; keys in env win.
    Output is not captured, so the tool writes straight to the terminal.
    """
    logger.info(f"$ {format_command(cmd)}")
    merged_env = os.environ.copy()
    if env:
        merged_env.update(env)

    return subprocess.run([str(part) for part in cmd], env=merged_env, cwd=cwd, check=check)
