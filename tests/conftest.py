"""Shared fixtures for the build script tests."""

from unittest.mock import patch

import pytest
import sh


@pytest.fixture
def mock_sh():
    """Replace the sh module used by objcopy, keeping its real exception types."""
    with patch("kbuild.base.objcopy.sh") as mocked:
        mocked.ErrorReturnCode = sh.ErrorReturnCode
        mocked.CommandNotFound = sh.CommandNotFound
        yield mocked


@pytest.fixture
def mock_run():
    """Patch subprocess.run behind run_command."""
    with patch("kbuild.common.utility.subprocess.run") as mocked:
        yield mocked


@pytest.fixture
def mock_call():
    """Patch subprocess.call used to launch QEMU."""
    with patch("kbuild.base.qemu.subprocess.call", return_value=0) as mocked:
        yield mocked


@pytest.fixture
def platform_file(tmp_path):
    path = tmp_path / "byteos.yaml"
    path.write_text(
        "bin:\n"
        "  riscv64-qemu:\n"
        "    target: riscv64gc-unknown-none-elf\n"
        "    configs:\n"
        "      board: qemu\n"
        "      driver: [kvirtio, ns16550a]\n"
        "  x86_64-qemu:\n"
        "    target: x86_64-unknown-none\n"
        "    configs:\n"
        "      - board=qemu\n"
        "      - nographic\n"
        "  aarch64-qemu:\n"
        "    target: aarch64-unknown-none-softfloat\n"
    )
    return path
