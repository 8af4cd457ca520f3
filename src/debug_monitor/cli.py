"""Debug monitor CLI — evaluate expressions against an emulated RV32 machine.

Usage:
    sdb                                  Interactive monitor
    sdb -e '1+2*3' -e '$sp'              Evaluate and exit
    sdb -i image.bin -e '*0x80000000'    Load memory image first
    sdb -b < commands.txt                Batch: run commands from stdin
"""

import argparse
import logging
import sys

from .errors import MonitorError
from .machine import Machine, MBASE, MSIZE
from .sdb import Monitor

logger = logging.getLogger(__name__)


def _int_arg(s):
    """argparse type: decimal or 0x-hex integer."""
    return int(s, 0)


def main(argv=None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='sdb',
        description='Simple debugger monitor with C-like expression evaluation.',
        epilog="""Examples:
  sdb -e '1+2*3'                     Prints 7 (0x7)
  sdb -e '-1'                        Prints 4294967295 (0xffffffff)
  sdb -i prog.bin -e '*0x80000000'   First word of the loaded image
  sdb -b < script.txt                Run monitor commands non-interactively""")

    parser.add_argument('-e', '--eval', action='append', default=[],
                        metavar='EXPR', dest='exprs',
                        help='Evaluate EXPR, print it, and exit (repeatable)')
    parser.add_argument('-i', '--image', default=None,
                        help=f'Raw memory image loaded at 0x{MBASE:08x}')
    parser.add_argument('--mem-size', type=_int_arg, default=MSIZE,
                        help=f'Physical memory size in bytes (default: 0x{MSIZE:x})')
    parser.add_argument('-b', '--batch', action='store_true',
                        help='Read commands from stdin without a prompt')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Debug logging (lexer matches, evaluator splits)')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    if args.mem_size <= 0:
        parser.error(f"--mem-size must be positive, got {args.mem_size}")

    try:
        return run(args)
    except MonitorError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nAborted.", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"\nUnexpected error: {type(e).__name__}: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 2


def run(args) -> int:
    """Set up the machine, then evaluate or enter the monitor loop."""
    machine = Machine(args.mem_size)

    if args.image:
        size = machine.mem.load_image(args.image)
        logger.info("Loaded %s (%d bytes) at 0x%08x", args.image, size, MBASE)

    if args.exprs:
        for text in args.exprs:
            val = machine.evaluate(text)
            print(f"{val} (0x{val:x})")
        return 0

    monitor = Monitor(machine)
    if args.batch:
        monitor.mainloop(sys.stdin)
    else:
        monitor.mainloop()
    return 0
