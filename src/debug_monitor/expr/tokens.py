"""Token kinds, tokens, and the operator precedence table.

Ranks: higher = binds tighter.  The main operator of a range is the
depth-zero token with the *lowest* rank.

    13  operands (NUM, REG)        never split on
    12  parentheses                handled structurally
    11  unary  - * !               only at the start of a range
    10  * /
     9  + -
     8  << >>
     7  < <= > >=
     6  == !=
     5  &
     4  ^
     3  |
     2  &&
     1  ||
"""

from collections import namedtuple
from enum import Enum

MAX_TOKENS = 1024      # tokens per expression
MAX_TOKEN_LEN = 31     # characters per literal / register token


class TokenKind(Enum):
    NUM = 'num'
    REG = 'reg'
    LPAREN = '('
    RPAREN = ')'
    ADD = '+'
    SUB = '-'
    MUL = '*'
    DIV = '/'
    NEG = 'neg'
    NOT = '!'
    DEREF = 'deref'
    EQ = '=='
    NE = '!='
    LT = '<'
    LE = '<='
    GT = '>'
    GE = '>='
    LAND = '&&'
    LOR = '||'
    BITAND = '&'
    BITOR = '|'
    BITXOR = '^'
    SHL = '<<'
    SHR = '>>'
    WHITESPACE = 'space'


class Token(namedtuple('Token', 'kind text')):
    """One lexical unit (immutable)."""
    __slots__ = ()

    def __repr__(self):
        return f"Token({self.kind.name}, {self.text!r})"


OPERAND_RANK = 13
PAREN_RANK = 12
UNARY_RANK = 11
EQUALITY_RANK = 6

_K = TokenKind
PRECEDENCE = {
    _K.NUM: OPERAND_RANK,
    _K.REG: OPERAND_RANK,
    _K.WHITESPACE: OPERAND_RANK,
    _K.LPAREN: PAREN_RANK,
    _K.RPAREN: PAREN_RANK,
    _K.NEG: UNARY_RANK,
    _K.DEREF: UNARY_RANK,
    _K.NOT: UNARY_RANK,
    _K.MUL: 10, _K.DIV: 10,
    _K.ADD: 9, _K.SUB: 9,
    _K.SHL: 8, _K.SHR: 8,
    _K.LT: 7, _K.LE: 7, _K.GT: 7, _K.GE: 7,
    _K.EQ: EQUALITY_RANK, _K.NE: EQUALITY_RANK,
    _K.BITAND: 5,
    _K.BITXOR: 4,
    _K.BITOR: 3,
    _K.LAND: 2,
    _K.LOR: 1,
}

UNARY_KINDS = frozenset((_K.NEG, _K.DEREF, _K.NOT))


def precedence(kind):
    """Binding strength of *kind* (higher = tighter)."""
    return PRECEDENCE[kind]
