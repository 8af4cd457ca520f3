"""Expression tokenizer.

Two stages, kept apart so each can be tested on its own:

  1. :func:`tokenize` scans the text with an ordered rule list.  At each
     position the first rule whose regex matches *at that position* wins.
  2. :func:`rewrite_unary` reclassifies ``-`` as negation and ``*`` as
     dereference where a binary reading has no left operand.
"""

import logging
import re

from ..errors import LexError
from .tokens import (Token, TokenKind, MAX_TOKENS, MAX_TOKEN_LEN,
                     UNARY_RANK, precedence)

logger = logging.getLogger(__name__)

K = TokenKind


# ── Lexical rules ─────────────────────────────────────────────────────
# Order matters: two-char operators before their one-char prefixes,
# hex before decimal.

_RULES = [
    (r'\s+',                 K.WHITESPACE),
    (r'\(',                  K.LPAREN),
    (r'\)',                  K.RPAREN),

    (r'==',                  K.EQ),
    (r'!=',                  K.NE),
    (r'<=',                  K.LE),
    (r'>=',                  K.GE),
    (r'<<',                  K.SHL),
    (r'>>',                  K.SHR),
    (r'&&',                  K.LAND),
    (r'\|\|',                K.LOR),

    (r'0[xX][0-9a-fA-F]+',   K.NUM),
    (r'[0-9]+',              K.NUM),

    (r'\+',                  K.ADD),
    (r'-',                   K.SUB),
    (r'\*',                  K.MUL),
    (r'/',                   K.DIV),
    (r'<',                   K.LT),
    (r'>',                   K.GT),
    (r'&',                   K.BITAND),
    (r'\|',                  K.BITOR),
    (r'\^',                  K.BITXOR),
    (r'!',                   K.NOT),

    (r'\$[0-9A-Za-z]{2,3}',  K.REG),
]

RULES = [(re.compile(pattern), kind) for pattern, kind in _RULES]

# Kinds whose matched text is kept (and length-checked)
_TEXT_KINDS = (K.NUM, K.REG)


def _caret(text, position):
    return f"{text}\n{' ' * position}^"


def tokenize(text):
    """Split *text* into raw tokens (no unary rewrite).

    Returns:
        ``list[Token]`` — whitespace dropped.

    Raises:
        LexError: no rule matches, a literal/register is longer than
        ``MAX_TOKEN_LEN``, or more than ``MAX_TOKENS`` tokens.
    """
    tokens = []
    position = 0
    n = len(text)

    while position < n:
        for regex, kind in RULES:
            m = regex.match(text, position)
            if m:
                break
        else:
            raise LexError(f"No match at position {position}\n"
                           f"{_caret(text, position)}", position)

        substr = m.group()
        logger.debug("match %s at position %d with len %d: %s",
                     kind.name, position, len(substr), substr)

        if kind is not K.WHITESPACE:
            if kind in _TEXT_KINDS and len(substr) > MAX_TOKEN_LEN:
                raise LexError(f"Token too long ({len(substr)} > "
                               f"{MAX_TOKEN_LEN} chars) at position "
                               f"{position}: {substr[:MAX_TOKEN_LEN]}...",
                               position)
            if len(tokens) == MAX_TOKENS:
                raise LexError(f"Expression too long (more than "
                               f"{MAX_TOKENS} tokens)", position)
            tokens.append(Token(kind, substr if kind in _TEXT_KINDS else kind.value))

        position = m.end()

    return tokens


# ── Unary rewrite ─────────────────────────────────────────────────────

_UNARY_OF = {K.SUB: K.NEG, K.MUL: K.DEREF}


def _expects_operand(prev):
    """Can a binary operator NOT follow *prev*?  (i.e. an operand is due)"""
    if prev is None:
        return True
    # after a unary or binary operator, or an opening bracket
    return precedence(prev.kind) <= UNARY_RANK or prev.kind is K.LPAREN


def rewrite_unary(tokens):
    """Reclassify ``-``/``*`` that cannot be binary.

    A ``-`` becomes NEG and a ``*`` becomes DEREF when it is the first
    token, or the previous token is an operator or ``(``.  Looks at
    exactly one preceding token.  Returns a new list.
    """
    out = []
    prev = None
    for tok in tokens:
        if tok.kind in _UNARY_OF and _expects_operand(prev):
            tok = Token(_UNARY_OF[tok.kind], tok.text)
        out.append(tok)
        prev = tok
    return out


def lex(text):
    """Tokenize and rewrite in one step."""
    return rewrite_unary(tokenize(text))
