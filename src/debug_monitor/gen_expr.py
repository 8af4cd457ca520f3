"""Random expression generator for testing the evaluator.

Generates expressions of unsigned decimal literals, ``+ - * /``,
parentheses and random spacing.  Divisions are emitted as
``a/((b)*0+N)`` so the divisor is never zero while ``b`` is still
evaluated.

The expected value is computed independently of the evaluator: the text
is parsed with Python's own ``ast`` (same precedence and associativity
as C for these four operators) and folded with unsigned wraparound at
every node, like a C ``unsigned`` computation.

Usage:
    gen-expr 100 --seed 1 > input      # "value expr" per line
    gen-expr --check input             # replay through evaluate()
"""

import ast
import random
import sys

from .errors import MonitorError
from .expr import evaluate
from .expr.evaluator import WORD_BITS, word_mask

MAX_LEN = 1000    # characters; keeps every expression under MAX_TOKENS


class ExprGenerator:
    """Build one random expression string per :meth:`generate` call."""

    def __init__(self, rng=None, max_len=MAX_LEN):
        self.rng = rng or random.Random()
        self.max_len = max_len
        self._buf = []
        self._len = 0

    def choose(self, n):
        return self.rng.randrange(n)

    def _append(self, s):
        self._buf.append(s)
        self._len += len(s)

    def _space(self):
        self._append(' ' * (self.choose(3) + 1))

    def _num(self):
        digits = [str(1 + self.choose(9))]
        digits += [str(self.choose(10)) for _ in range(self.choose(5) + 1)]
        self._append(''.join(digits))

    def _expr(self):
        self._space()
        if self._len > self.max_len // 2:
            self._num()
        else:
            kind = self.choose(3)
            if kind == 0:
                self._num()
            elif kind == 1:
                self._append('(')
                self._expr()
                self._append(')')
            else:
                op = '+-*/'[self.choose(4)]
                if op == '/':
                    self._expr()
                    self._append('/((')
                    self._expr()
                    self._append(')*0+')
                    self._num()
                    self._append(')')
                else:
                    self._expr()
                    self._append(op)
                    self._expr()
        self._space()

    def generate(self):
        """Return a new expression string no longer than *max_len*."""
        while True:
            self._buf, self._len = [], 0
            self._expr()
            if self._len <= self.max_len:
                return ''.join(self._buf)


# ══════════════════════════════════════════════════════════════════════
# REFERENCE VALUE
# ══════════════════════════════════════════════════════════════════════

def _fold(node, mask):
    if isinstance(node, ast.Constant) and isinstance(node.value, int):
        return node.value & mask
    if isinstance(node, ast.BinOp):
        a = _fold(node.left, mask)
        b = _fold(node.right, mask)
        if isinstance(node.op, ast.Add):
            return (a + b) & mask
        if isinstance(node.op, ast.Sub):
            return (a - b) & mask
        if isinstance(node.op, ast.Mult):
            return (a * b) & mask
        if isinstance(node.op, ast.Div):
            if b == 0:
                raise ZeroDivisionError("division by zero")
            return a // b
    raise ValueError(f"Unsupported syntax: {ast.dump(node)}")


def reference_value(text, word_bits=WORD_BITS):
    """Unsigned value of a ``+ - * /`` expression, computed via ``ast``."""
    tree = ast.parse(text.strip(), mode='eval')
    return _fold(tree.body, word_mask(word_bits))


def generate(rng=None, max_len=MAX_LEN):
    """One random test case: ``(value, text)``."""
    text = ExprGenerator(rng, max_len).generate()
    return reference_value(text), text


# ══════════════════════════════════════════════════════════════════════
# CHECK
# ══════════════════════════════════════════════════════════════════════

def parse_case(line):
    """Split a ``"value expr"`` line.  ValueError if either half is missing."""
    value, _, text = line.strip().partition(' ')
    if not text.strip():
        raise ValueError(f"No expression after {value!r}")
    return int(value), text


def check_cases(lines, out=None):
    """Evaluate each ``value expr`` line; return the number of failures."""
    failures = 0
    for n, line in enumerate(lines, 1):
        if not line.strip():
            continue
        try:
            expected, text = parse_case(line)
        except ValueError:
            failures += 1
            if out is not None:
                print(f"line {n}: malformed, expected 'value expr': "
                      f"{line.strip()}", file=out)
            continue
        try:
            got = evaluate(text)
        except MonitorError as e:
            got = e
        if got != expected:
            failures += 1
            if out is not None:
                print(f"line {n}: expected {expected}, got {got}: {text}",
                      file=out)
    return failures


def main(argv=None):
    """CLI entry point."""
    import argparse
    parser = argparse.ArgumentParser(
        prog='gen-expr',
        description='Generate random expressions with their expected values.')
    parser.add_argument('count', type=int, nargs='?', default=1,
                        help='Number of expressions (default: 1)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed (default: time based)')
    parser.add_argument('--max-len', type=int, default=MAX_LEN,
                        help=f'Maximum expression length (default: {MAX_LEN})')
    parser.add_argument('--check', metavar='FILE', default=None,
                        help='Evaluate a generated FILE and report mismatches')
    args = parser.parse_args(argv)

    if args.check:
        with open(args.check) as f:
            lines = f.readlines()
        failures = check_cases(lines, out=sys.stderr)
        total = sum(1 for line in lines if line.strip())
        print(f"{total - failures}/{total} passed")
        return 1 if failures else 0

    rng = random.Random(args.seed)
    for i in range(args.count):
        print(f"Generating expr [{i + 1}/{args.count}]", file=sys.stderr)
        value, text = generate(rng, args.max_len)
        print(f"{value} {text}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
