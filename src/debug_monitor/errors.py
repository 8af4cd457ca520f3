"""Error types for debug-monitor."""


class MonitorError(Exception):
    """Base error for debug-monitor."""
    pass


class ExprError(MonitorError):
    """An expression could not be evaluated."""
    pass


class LexError(ExprError):
    """No lexical rule matched, a token is too long, or too many tokens."""

    def __init__(self, msg, position=None):
        self.position = position
        super().__init__(msg)


class ParenMismatchError(ExprError):
    """Unbalanced or improperly nested parentheses."""
    pass


class EmptyRangeError(ExprError):
    """An operand is missing (empty token range)."""
    pass


class NotAnOperandError(ExprError):
    """A lone token that is neither a literal nor a register."""
    pass


class NoMainOperatorError(ExprError):
    """No operator to split on, e.g. two operands side by side."""
    pass


class DivisionByZeroError(ExprError):
    """Right-hand side of ``/`` evaluated to zero."""
    pass


class UnknownRegisterError(ExprError):
    """Register name not known to the register file."""
    pass


class MemoryAccessError(MonitorError):
    """Physical address outside the emulated memory."""
    pass


class WatchpointError(MonitorError):
    """Watchpoint pool full, bad expression, or unknown number."""
    pass
