"""Debugger expression evaluator.

Evaluates monitor expressions to one unsigned machine word:
  - Decimal and hex (0x1F) literals
  - Register references ($ra, $sp, $a0, $pc, $x10, ...)
  - Parentheses
  - Unary: - (negate), ! (logical not), * (read memory word)
  - Binary, loosest to tightest:
        ||   &&   |   ^   &   == !=   < <= > >=   << >>   + -   * /

All arithmetic wraps at the word size (32 bits by default).

Usage as library:
    from debug_monitor.expr import evaluate, try_evaluate
    evaluate('($sp + 8) * 2', lookup_register=regs.lookup)
    result = try_evaluate('1/0')     # EvalResult(value=0, error=...)
"""

import sys
from collections import namedtuple

from ..errors import MonitorError
from .evaluator import Evaluator, WORD_BITS
from .lexer import lex


class EvalResult(namedtuple('EvalResult', 'value error')):
    """Value plus failure.  Ignore *value* unless :attr:`success`."""
    __slots__ = ()

    @property
    def success(self):
        return self.error is None


def evaluate(text, lookup_register=None, read_memory_word=None,
             word_bits=WORD_BITS):
    """Evaluate an expression string to an unsigned word.

    Args:
        text:             Expression (e.g. "$a0 + 4*($sp - 0x10)")
        lookup_register:  ``name -> int`` for ``$name``.
        read_memory_word: ``addr -> int`` for ``*addr``.
        word_bits:        Machine word width.

    Returns:
        ``int`` in ``[0, 2**word_bits)``.

    Raises:
        ExprError (LexError, ParenMismatchError, ...) on bad input,
        MemoryAccessError from *read_memory_word*.
    """
    tokens = lex(text)
    return Evaluator(tokens, lookup_register, read_memory_word,
                     word_bits).evaluate()


def try_evaluate(text, lookup_register=None, read_memory_word=None,
                 word_bits=WORD_BITS):
    """Like :func:`evaluate` but returns an :class:`EvalResult`."""
    try:
        return EvalResult(evaluate(text, lookup_register, read_memory_word,
                                   word_bits), None)
    except MonitorError as e:
        return EvalResult(0, e)


def main(argv=None):
    """Evaluate expressions given on the command line (no registers)."""
    import argparse
    parser = argparse.ArgumentParser(
        description='Evaluate debugger expressions')
    parser.add_argument('expr', nargs='+', help='Expression(s)')
    parser.add_argument('-w', '--word-bits', type=int, default=WORD_BITS,
                        help=f'Word width in bits (default: {WORD_BITS})')
    args = parser.parse_args(argv)

    status = 0
    for text in args.expr:
        try:
            val = evaluate(text, word_bits=args.word_bits)
            print(f"{val} (0x{val:x})")
        except MonitorError as e:
            print(f"Error: {e}", file=sys.stderr)
            status = 1
    return status
