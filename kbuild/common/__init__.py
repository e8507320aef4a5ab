# SPDX-License-Identifier: BSD-3-Clause
"""
Shared configuration for the kernel build scripts.

Nothing in this package spawns external processes except the command
runner in utility.
"""
