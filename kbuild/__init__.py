# SPDX-License-Identifier: BSD-3-Clause
"""
Build and run scripts for the kernel.

Wraps cargo, rust-objcopy and QEMU for each supported architecture.
"""
