"""debug-monitor: expression evaluation for an emulator debugger monitor.

Supports:
  - C-like expressions over unsigned 32-bit words (see ``expr``)
  - Register references ($ra, $sp, $a0, $pc, $x5, ...)
  - Memory dereference (*addr) against emulated physical memory
  - Watchpoints re-evaluated after every state change
  - Random expression generation for evaluator testing

Architecture:
  ``expr`` is self-contained: text → tokens → recursive evaluation,
  with registers and memory reached only through two callables.
  ``machine``, ``watchpoint`` and ``sdb`` build the monitor around it.
"""

__version__ = '1.0.0'
