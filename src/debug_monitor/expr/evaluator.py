"""Precedence-split recursive evaluator.

No tree is built.  ``eval(p, q)`` works directly on the token list:

  1. ``p > q``            → missing operand
  2. ``p == q``           → literal or register
  3. ``(`` … ``)`` group  → strip the brackets
  4. otherwise            → split on the main operator (the loosest-binding
     depth-zero token, rightmost on ties) and recurse on both sides.

Rightmost-on-ties gives left associativity: ``2-3-4`` splits at the
second ``-``.
"""

import logging

from ..errors import (ExprError, ParenMismatchError, EmptyRangeError,
                      NotAnOperandError, NoMainOperatorError, DivisionByZeroError,
                      UnknownRegisterError, MemoryAccessError)
from .tokens import TokenKind, UNARY_RANK, UNARY_KINDS, precedence

logger = logging.getLogger(__name__)

K = TokenKind

WORD_BITS = 32


def word_mask(bits):
    return (1 << bits) - 1


def str_to_num(s, mask):
    """Parse a decimal or ``0x`` hex literal, wrapped to the word."""
    if s[1:2] in ('x', 'X'):
        return int(s, 16) & mask
    return int(s, 10) & mask


# ══════════════════════════════════════════════════════════════════════
# PARENTHESES
# ══════════════════════════════════════════════════════════════════════

def is_paren_group(tokens, p, q):
    """Is ``tokens[p..q]`` one bracket pair wrapping everything inside?

    ``(1+2)`` → True, ``(1)+(2)`` → False (depth hits zero before *q*).
    """
    if p >= q or tokens[p].kind is not K.LPAREN:
        return False
    depth = 0
    for i in range(p, q + 1):
        kind = tokens[i].kind
        if kind is K.LPAREN:
            depth += 1
        elif kind is K.RPAREN:
            depth -= 1
        if depth < 0:
            return False
        if depth == 0 and i != q:
            return False
    return depth == 0


def check_balance(tokens):
    """Raise ParenMismatchError unless every bracket pairs up."""
    depth = 0
    for i, tok in enumerate(tokens):
        if tok.kind is K.LPAREN:
            depth += 1
        elif tok.kind is K.RPAREN:
            depth -= 1
            if depth < 0:
                raise ParenMismatchError(
                    f"Unmatched ')' at token {i}")
    if depth:
        raise ParenMismatchError(
            f"{depth} unclosed '(' in expression")


# ══════════════════════════════════════════════════════════════════════
# OPERATOR SEMANTICS
# ══════════════════════════════════════════════════════════════════════

def _div(a, b):
    if b == 0:
        raise DivisionByZeroError("Division by zero")
    return a // b


# Comparison / logical results are already 0 or 1; arithmetic ones are
# masked by the caller.  Shift counts wrap like the hardware shifter.
_BINARY = {
    K.ADD:    lambda a, b, bits: a + b,
    K.SUB:    lambda a, b, bits: a - b,
    K.MUL:    lambda a, b, bits: a * b,
    K.DIV:    lambda a, b, bits: _div(a, b),
    K.EQ:     lambda a, b, bits: int(a == b),
    K.NE:     lambda a, b, bits: int(a != b),
    K.LT:     lambda a, b, bits: int(a < b),
    K.LE:     lambda a, b, bits: int(a <= b),
    K.GT:     lambda a, b, bits: int(a > b),
    K.GE:     lambda a, b, bits: int(a >= b),
    K.LAND:   lambda a, b, bits: int(bool(a) and bool(b)),
    K.LOR:    lambda a, b, bits: int(bool(a) or bool(b)),
    K.BITAND: lambda a, b, bits: a & b,
    K.BITOR:  lambda a, b, bits: a | b,
    K.BITXOR: lambda a, b, bits: a ^ b,
    K.SHL:    lambda a, b, bits: a << (b & (bits - 1)),
    K.SHR:    lambda a, b, bits: a >> (b & (bits - 1)),
}


# ══════════════════════════════════════════════════════════════════════
# EVALUATOR
# ══════════════════════════════════════════════════════════════════════

class Evaluator:
    """Evaluate ranges of one token list.

    Args:
        tokens:           Rewritten token list (see ``lexer.lex``).
        lookup_register:  ``name -> int`` (name without ``$``).  May raise
                          UnknownRegisterError or KeyError.
        read_memory_word: ``addr -> int`` for the ``*`` operator.
        word_bits:        Width of the machine word.
    """

    def __init__(self, tokens, lookup_register=None, read_memory_word=None,
                 word_bits=WORD_BITS):
        self.tokens = tokens
        self.lookup_register = lookup_register
        self.read_memory_word = read_memory_word
        self.bits = word_bits
        self.mask = word_mask(word_bits)

    def evaluate(self):
        """Evaluate the whole token list."""
        if not self.tokens:
            raise EmptyRangeError("Empty expression")
        check_balance(self.tokens)
        try:
            return self.eval(0, len(self.tokens) - 1)
        except RecursionError:
            raise ExprError("Expression nested too deeply") from None

    # ── Leaves ───────────────────────────────────────────────────────

    def _operand(self, tok):
        if tok.kind is K.NUM:
            return str_to_num(tok.text, self.mask)
        if tok.kind is K.REG:
            return self._register(tok.text[1:])
        raise NotAnOperandError(f"Expected a number or register, "
                                f"got '{tok.text}'")

    def _register(self, name):
        if self.lookup_register is None:
            raise UnknownRegisterError(f"No register file to look up '${name}'")
        try:
            value = self.lookup_register(name)
        except KeyError:
            raise UnknownRegisterError(f"Unknown register '${name}'") from None
        return int(value) & self.mask

    def _deref(self, addr):
        if self.read_memory_word is None:
            raise MemoryAccessError(f"No memory to dereference 0x{addr:x}")
        return int(self.read_memory_word(addr)) & self.mask

    def _unary(self, op, val):
        if op is K.NEG:
            return -val & self.mask
        if op is K.DEREF:
            return self._deref(val)
        return 0 if val else 1

    # ── Main operator ────────────────────────────────────────────────

    def main_operator(self, p, q):
        """Position of the operator that splits ``[p, q]``.

        Loosest-binding token at bracket depth zero, rightmost on ties.
        Unary operators count only at *p*; any other unary token at
        depth zero (``1 !2``) cannot split the range.

        Raises:
            ParenMismatchError:  depth goes negative inside the range.
            NoMainOperatorError: nothing to split on.
        """
        pos = None
        best = None
        depth = 0
        for i in range(p, q + 1):
            kind = self.tokens[i].kind
            if kind is K.LPAREN:
                depth += 1
                continue
            if kind is K.RPAREN:
                depth -= 1
                if depth < 0:
                    raise ParenMismatchError(f"Unmatched ')' at token {i}")
                continue
            if depth != 0:
                continue
            rank = precedence(kind)
            if rank > UNARY_RANK:
                continue
            if rank == UNARY_RANK and i != p:
                continue
            if best is None or rank <= best:
                best, pos = rank, i

        if pos is None:
            text = ' '.join(t.text for t in self.tokens[p:q + 1])
            raise NoMainOperatorError(f"No operator to split '{text}'")
        return pos

    # ── Recursion ────────────────────────────────────────────────────

    def eval(self, p, q):
        """Evaluate ``tokens[p..q]`` (inclusive) to a word."""
        if p > q:
            raise EmptyRangeError("Missing operand")

        if p == q:
            return self._operand(self.tokens[p])

        if is_paren_group(self.tokens, p, q):
            return self.eval(p + 1, q - 1)

        pos = self.main_operator(p, q)
        op = self.tokens[pos].kind
        logger.debug("eval [%d, %d]: split on %s at %d", p, q, op.name, pos)

        if op in UNARY_KINDS:
            # A leading run of unary operators applies to one operand;
            # fold it in a loop so long chains don't nest calls.
            j = p
            while j < q and self.tokens[j].kind in UNARY_KINDS:
                j += 1
            val = self.eval(j, q)
            for i in range(j - 1, p - 1, -1):
                val = self._unary(self.tokens[i].kind, val)
            return val

        lhs = self.eval(p, pos - 1)
        rhs = self.eval(pos + 1, q)
        return _BINARY[op](lhs, rhs, self.bits) & self.mask
