# SPDX-License-Identifier: BSD-3-Clause
"""
Build, conversion and emulator stages for the kernel.

Each module wraps one external tool (cargo, rust-objcopy, QEMU); kernel
sequences them and cli exposes them on the command line.
"""
