"""Simple debugger monitor: command table + read/dispatch loop.

Commands:
    help [CMD]        list commands
    q                 quit
    info r | info w   registers / watchpoints
    x N EXPR          dump N words starting at address EXPR
    p EXPR            print EXPR
    w EXPR            watch EXPR
    d N               delete watchpoint N
    set $REG = EXPR   write a register
    set *ADDR = EXPR  write a memory word

The CPU itself is not driven from here, so ``set`` is the command that
changes state; watchpoints are scanned after every ``set``.
"""

import re
import sys

from .errors import MonitorError
from .machine import Machine
from .watchpoint import WatchpointPool

X_MAX_WORDS = 100000

_RE_NUMBER = re.compile(r'^-?\d+$')
_RE_SET = re.compile(r'^(\$\w+|\*.+?)\s*=(?!=)\s*(.+)$')


def is_number(s):
    return s is not None and bool(_RE_NUMBER.match(s))


class Monitor:
    """Interactive monitor over one :class:`Machine`."""

    def __init__(self, machine=None, out=None):
        self.machine = machine or Machine()
        self.wps = WatchpointPool(self.machine.evaluate)
        self.out = out or sys.stdout
        self.cmd_table = [
            ('help', 'Display information about all supported commands', self.cmd_help),
            ('q',    'Exit the monitor', self.cmd_q),
            ('info', '(info r/w) Print registers or watchpoints', self.cmd_info),
            ('x',    '(x N EXPR) Print N words starting at address EXPR', self.cmd_x),
            ('p',    '(p EXPR) Evaluate EXPR and print the result', self.cmd_p),
            ('w',    '(w EXPR) Stop when the value of EXPR changes', self.cmd_w),
            ('d',    '(d N) Delete watchpoint N', self.cmd_d),
            ('set',  '(set $REG = EXPR | set *ADDR = EXPR) Write a register or word', self.cmd_set),
        ]

    def _print(self, *lines):
        for line in lines:
            print(line, file=self.out)

    # ── Commands ─────────────────────────────────────────────────────

    def cmd_help(self, args):
        if args is None:
            for name, desc, _ in self.cmd_table:
                self._print(f"{name} - {desc}")
            return 0
        for name, desc, _ in self.cmd_table:
            if name == args:
                self._print(f"{name} - {desc}")
                return 0
        self._print(f"Unknown command '{args}'")
        return 0

    def cmd_q(self, args):
        return -1

    def cmd_info(self, args):
        if args is None:
            self._print("Expect SUBCMD.")
        elif len(args.split()) != 1:
            self._print("Expect exactly one SUBCMD.")
        elif args == 'r':
            self._print(*self.machine.regs.display())
        elif args == 'w':
            self._print(*self.wps.table())
        else:
            self._print('Unexpected SUBCMD (expect "r" or "w").')
        return 0

    def cmd_x(self, args):
        parts = args.split(None, 1) if args else []
        if len(parts) != 2:
            self._print("Expect an integer N and an expression EXPR.")
            return 0
        n_arg, expr = parts
        if not is_number(n_arg) or not 0 < int(n_arg) <= X_MAX_WORDS:
            self._print(f"Expect a positive integer no larger than {X_MAX_WORDS}.")
            return 0
        addr = self.machine.evaluate(expr)
        mem = self.machine.mem
        for i in range(int(n_arg)):
            a = addr + i * 4
            b = mem.read(a, 4).to_bytes(4, 'little')
            self._print(f"0x{a:08x} : " + '\t'.join(f"0x{x:02x}" for x in b))
        return 0

    def cmd_p(self, args):
        if args is None:
            self._print("Expect an expression EXPR.")
            return 0
        val = self.machine.evaluate(args)
        self._print(f"{val} (0x{val:x})")
        return 0

    def cmd_w(self, args):
        if args is None:
            self._print("Expect an expression EXPR.")
            return 0
        wp = self.wps.new(args)
        self._print(f"Set watchpoint [{wp.no}].")
        return 0

    def cmd_d(self, args):
        if not is_number(args) or int(args) < 0:
            self._print("Expect a watchpoint number.")
            return 0
        no = int(args)
        self.wps.delete(no)
        self._print(f"Deleted watchpoint [{no}]")
        return 0

    def cmd_set(self, args):
        m = _RE_SET.match(args.strip()) if args else None
        if not m:
            self._print("Expect '$REG = EXPR' or '*ADDR = EXPR'.")
            return 0
        target, expr = m.groups()
        val = self.machine.evaluate(expr)
        if target.startswith('$'):
            self.machine.regs.write(target[1:], val)
        else:
            addr = self.machine.evaluate(target[1:])
            self.machine.mem.write_word(addr, val)
        self.report_watchpoints()
        return 0

    # ── Watchpoints ──────────────────────────────────────────────────

    def report_watchpoints(self):
        """Scan watchpoints and print changes.  True if any changed."""
        changed = self.wps.scan()
        for wp, old, new in changed:
            self._print(f"Watchpoint [{wp.no}]: {wp.expr}",
                        f"Old value = {old}",
                        f"New value = {new}")
        return bool(changed)

    # ── Dispatch ─────────────────────────────────────────────────────

    def execute(self, line):
        """Run one command line.  Returns the handler result (<0 = quit)."""
        parts = line.strip().split(None, 1)
        if not parts:
            return 0
        cmd = parts[0]
        args = parts[1].strip() if len(parts) > 1 else None

        for name, _, handler in self.cmd_table:
            if name == cmd:
                try:
                    return handler(args)
                except MonitorError as e:
                    self._print(f"Error: {e}")
                    return 0
        self._print(f"Unknown command '{cmd}'")
        return 0

    def mainloop(self, lines=None, prompt='(sdb) '):
        """Read and run commands until ``q`` or end of input.

        Args:
            lines:  Iterable of command lines (batch mode).  ``None``
                    reads interactively with ``input()``.
        """
        if lines is not None:
            for line in lines:
                if self.execute(line) < 0:
                    return
            return

        while True:
            try:
                line = input(prompt)
            except EOFError:
                return
            if self.execute(line) < 0:
                return
