"""Watchpoint pool.

A fixed pool of ``NR_WP`` slots.  Slot numbers are the watchpoint
numbers the user sees; the most recently deleted slot is the next
one handed out.
Scanning re-evaluates every active expression once, in order.
"""

import logging

from .errors import MonitorError, WatchpointError

logger = logging.getLogger(__name__)

NR_WP = 32
WP_EXPR_MAX = 50   # expression text must be shorter than this


class Watchpoint:
    __slots__ = ('no', 'expr', 'last')

    def __init__(self, no, expr, last):
        self.no = no
        self.expr = expr
        self.last = last

    def __repr__(self):
        return f"Watchpoint({self.no}, {self.expr!r}, last={self.last})"


class WatchpointPool:
    """Active watchpoints over one evaluator.

    Args:
        evaluate: ``text -> int`` raising MonitorError on failure,
                  e.g. ``Machine.evaluate``.
    """

    def __init__(self, evaluate, size=NR_WP):
        self.evaluate = evaluate
        self.size = size
        self._free = list(range(size))
        self._active = []   # in creation order

    def __len__(self):
        return len(self._active)

    def __iter__(self):
        return iter(self._active)

    def new(self, text):
        """Set a watchpoint on *text*.  Returns the new Watchpoint."""
        text = text.strip()
        if not self._free:
            raise WatchpointError("The number of watchpoints reached the limit")
        if len(text) >= WP_EXPR_MAX:
            raise WatchpointError(
                f"Expression too long ({len(text)} chars, max {WP_EXPR_MAX - 1})")
        try:
            value = self.evaluate(text)
        except MonitorError as e:
            raise WatchpointError(f"Incorrect expression: {e}") from e

        wp = Watchpoint(self._free.pop(0), text, value)
        self._active.append(wp)
        logger.info("Set watchpoint [%d]: %s = %d", wp.no, text, value)
        return wp

    def delete(self, no):
        for i, wp in enumerate(self._active):
            if wp.no == no:
                del self._active[i]
                self._free.insert(0, no)
                logger.info("Deleted watchpoint [%d]", no)
                return wp
        raise WatchpointError(f"Can't find watchpoint [{no}]")

    def scan(self):
        """Re-evaluate all watchpoints.

        Returns:
            ``[(wp, old, new)]`` for every watchpoint whose value changed.

        Raises:
            WatchpointError if an expression no longer evaluates.  No
            stored value is updated in that case.
        """
        values = []
        for wp in self._active:
            try:
                values.append(self.evaluate(wp.expr))
            except MonitorError as e:
                raise WatchpointError(
                    f"Watchpoint [{wp.no}] {wp.expr}: {e}") from e

        changed = []
        for wp, value in zip(self._active, values):
            if value != wp.last:
                logger.info("Watchpoint [%d] %s: %d -> %d",
                            wp.no, wp.expr, wp.last, value)
                changed.append((wp, wp.last, value))
                wp.last = value
        return changed

    def table(self):
        """``info w`` lines."""
        lines = [f"{'No.':<5} | {'Current':<10} | Expr"]
        for wp in self._active:
            lines.append(f"{wp.no:<5} | {wp.last:<10} | {wp.expr}")
        return lines
