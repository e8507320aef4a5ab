#!/usr/bin/env python3
# SPDX-License-Identifier: BSD-3-Clause
"""
Command line entry point for building and running the kernel.

Examples:
  kbuild build                         # release build for riscv64
  kbuild -a x86_64 --debug build       # debug build for x86_64
  kbuild -p riscv64-qemu run           # platform from byteos.yaml
  kbuild run -a aarch64 --gdb -- -monitor none
  kbuild build --rustflag -Cdebuginfo=2    # flags may start with "-"
"""

import argparse
import logging
import sys

from kbuild.base.kernel import build_kernel, run_kernel
from kbuild.base.qemu import DEFAULT_MEMORY, DEFAULT_SMP
from kbuild.common.arch import DEFAULT_ARCH, get_supported_archs
from kbuild.common.config import DEFAULT_HEAP_SIZE, DEFAULT_MOUNT_IMG, BuildConfig
from kbuild.common.errors import BuildFailure, ConfigurationError, ConversionFailure
from kbuild.common.platform import DEFAULT_CONFIG_FILE, PlatformResolver, parse_configs
from kbuild.common.utility import format_hex_literal, parse_size

logger = logging.getLogger(__name__)

LOG_LEVELS = {
    'error': logging.ERROR,
    'warn': logging.WARNING,
    'info': logging.INFO,
    'debug': logging.DEBUG,
}
DEFAULT_LOG_LEVEL = 'info'


def heap_size(value: str) -> str:
    """argparse type: normalize a heap size to a Rust hex literal."""
    try:
        return format_hex_literal(parse_size(value))
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def add_common_args(parser: argparse.ArgumentParser, suppress: bool = False):
    """Add the options shared by every command.

    With suppress=True the options get no defaults, so that values given
    before the subcommand are not overwritten by the subparser.
    """
    def default(value):
        return argparse.SUPPRESS if suppress else value

    parser.add_argument('-a', '--arch', choices=get_supported_archs(),
                        default=default(DEFAULT_ARCH),
                        help=f'Target architecture (default: {DEFAULT_ARCH})')
    parser.add_argument('-p', '--platform', default=default(None),
                        help='Platform name from the config file (overrides --arch)')
    parser.add_argument('-c', '--config', default=default(DEFAULT_CONFIG_FILE),
                        help=f'Platform config file (default: {DEFAULT_CONFIG_FILE})')
    parser.add_argument('--debug', dest='release', action='store_false',
                        default=default(True),
                        help='Build in debug mode instead of release')
    parser.add_argument('--log-level', choices=list(LOG_LEVELS.keys()),
                        default=default(DEFAULT_LOG_LEVEL),
                        help=f'Log level for these scripts and the kernel (default: {DEFAULT_LOG_LEVEL})')
    parser.add_argument('--cfg', action='append', metavar='NAME[=VALUE]',
                        default=default(None),
                        help='Extra rustc --cfg switch (repeatable)')
    parser.add_argument('--rustflag', action='append', metavar='FLAG',
                        default=default(None),
                        help='Extra RUSTFLAGS entry, e.g. --rustflag -Cdebuginfo=2 (repeatable)')
    parser.add_argument('--heap-size', type=heap_size,
                        default=default(DEFAULT_HEAP_SIZE),
                        help=f'Kernel heap size (default: {DEFAULT_HEAP_SIZE})')
    parser.add_argument('--mount-img', default=default(DEFAULT_MOUNT_IMG),
                        help=f'Disk image mounted by the kernel (default: {DEFAULT_MOUNT_IMG})')


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='kbuild',
        description='Build and run the kernel',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='Arguments after "--" are passed to QEMU by the run command.',
    )
    add_common_args(parser)

    commands = parser.add_subparsers(dest='command', required=True)

    build_parser = commands.add_parser('build', help='Build the kernel ELF and raw binary')
    add_common_args(build_parser, suppress=True)

    run_parser = commands.add_parser('run', help='Build the kernel and run it in QEMU')
    add_common_args(run_parser, suppress=True)
    run_parser.add_argument('-m', '--memory', default=DEFAULT_MEMORY,
                            help=f'Memory size (default: {DEFAULT_MEMORY})')
    run_parser.add_argument('-s', '--smp', type=int, default=DEFAULT_SMP,
                            help=f'Number of CPU cores (default: {DEFAULT_SMP})')
    run_parser.add_argument('--gdb', action='store_true',
                            help='Wait for GDB on tcp::1234 before starting')

    return parser


def setup_logging(level: str):
    logging.basicConfig(
        level=LOG_LEVELS.get(level, logging.INFO),
        format='[%(levelname)s] %(message)s',
        force=True,
    )


def make_config(args: argparse.Namespace) -> BuildConfig:
    """Resolve command line options into a BuildConfig.

    Raises:
        ConfigurationError: unknown platform, bad config file or bad --cfg
    """
    options = dict(
        cfgs=parse_configs(args.cfg),
        release=args.release,
        rustflags=tuple(args.rustflag or ()),
        mount_img=args.mount_img,
        heap_size=args.heap_size,
        log_level=args.log_level,
    )

    if args.platform:
        platform = PlatformResolver(args.config).resolve(args.platform)
        logger.debug(f"Platform {platform.name}: {platform.target} {platform.configs}")
        return BuildConfig.from_platform(platform, **options)

    return BuildConfig.from_arch(args.arch, **options)


def attach_flag_values(argv: list, options=('--rustflag',)) -> list:
    """Rewrite '--rustflag -Cfoo' as '--rustflag=-Cfoo'.

    argparse would otherwise read a value starting with '-' as an option.
    """
    result = []
    args = iter(argv)
    for arg in args:
        if arg in options:
            value = next(args, None)
            if value is not None:
                arg = f'{arg}={value}'
        result.append(arg)
    return result


def split_passthrough(argv: list) -> tuple:
    """Split argv at the first '--' into (own args, QEMU args)."""
    if '--' in argv:
        index = argv.index('--')
        return argv[:index], argv[index + 1:]
    return argv, []


def main(argv: list = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    argv, qemu_args = split_passthrough(list(argv))

    parser = create_parser()
    args = parser.parse_args(attach_flag_values(argv))
    if qemu_args and args.command != 'run':
        parser.error(f"arguments after '--' are only accepted by run: {' '.join(qemu_args)}")
    setup_logging(args.log_level)

    try:
        config = make_config(args)
        if args.command == 'build':
            build_kernel(config)
            return 0

        return run_kernel(
            config,
            memory=args.memory,
            smp=args.smp,
            gdb=args.gdb,
            extra_args=qemu_args,
        )
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except BuildFailure as e:
        logger.error(f"Failed to build the kernel: {e}")
        return 1
    except ConversionFailure as e:
        logger.error(f"Failed to convert the kernel to a binary: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted.")
        return 130


if __name__ == '__main__':
    sys.exit(main())
