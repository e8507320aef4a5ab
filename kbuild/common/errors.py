# SPDX-License-Identifier: BSD-3-Clause
"""Exceptions raised by the build scripts."""


class ConfigurationError(ValueError):
    """Missing or invalid configuration, or an unknown platform/architecture."""


class StageFailure(RuntimeError):
    """An external tool exited with a non-zero status."""

    stage = 'command'

    def __init__(self, cmd: list, returncode: int, detail: str = None):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.detail = detail
        message = f'{self.stage} failed with exit code {returncode}: {" ".join(self.cmd)}'
        if detail:
            message += f'\n{detail}'
        super().__init__(message)


class BuildFailure(StageFailure):
    """cargo exited with a non-zero status."""

    stage = 'Kernel build'


class ConversionFailure(StageFailure):
    """rust-objcopy exited with a non-zero status."""

    stage = 'Binary conversion'
