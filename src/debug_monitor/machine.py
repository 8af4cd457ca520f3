"""Emulated machine state seen by the monitor: RV32 registers + memory.

Physical memory window: $80000000-$87FFFFFF (128MB), little endian.
Only what the monitor needs lives here: register read/write by name,
byte-level physical reads/writes, and raw image loading.
"""

import numpy as np

from .errors import MemoryAccessError, UnknownRegisterError
from .expr import evaluate, try_evaluate
from .expr.evaluator import WORD_BITS

MBASE = 0x80000000    # Start of physical memory
MSIZE = 0x8000000     # 128MB
WORD_BYTES = WORD_BITS // 8

# ABI names in x0..x31 order
REG_NAMES = [
    '$0', 'ra', 'sp', 'gp', 'tp', 't0', 't1', 't2',
    's0', 's1', 'a0', 'a1', 'a2', 'a3', 'a4', 'a5',
    'a6', 'a7', 's2', 's3', 's4', 's5', 's6', 's7',
    's8', 's9', 's10', 's11', 't3', 't4', 't5', 't6',
]

_PC = 32
_INDEX = {name: i for i, name in enumerate(REG_NAMES)}
_INDEX.update({f'x{i}': i for i in range(32)})
_INDEX['fp'] = _INDEX['s0']
_INDEX['pc'] = _PC


class Registers:
    """32 general-purpose registers plus ``pc``, as unsigned words."""

    def __init__(self, pc=MBASE):
        self.gpr = np.zeros(33, dtype=np.uint32)
        self.gpr[_PC] = pc

    @staticmethod
    def index(name):
        try:
            return _INDEX[name]
        except KeyError:
            raise UnknownRegisterError(f"Unknown register '${name}'") from None

    def lookup(self, name):
        """Value of register *name* (no ``$``)."""
        return int(self.gpr[self.index(name)])

    def write(self, name, value):
        i = self.index(name)
        if i == 0:
            return  # x0 is hard-wired to zero
        self.gpr[i] = value & 0xFFFFFFFF

    @property
    def pc(self):
        return int(self.gpr[_PC])

    def display(self):
        """``info r`` lines: name, hex, decimal."""
        lines = []
        for i, name in enumerate(REG_NAMES):
            v = int(self.gpr[i])
            lines.append(f"{name:<4} 0x{v:08x}  {v}")
        lines.append(f"{'pc':<4} 0x{self.pc:08x}  {self.pc}")
        return lines


class PhysicalMemory:
    """Flat little-endian memory backed by a ``uint8`` array."""

    def __init__(self, base=MBASE, size=MSIZE):
        self.base = base
        self.size = size
        self.pmem = np.zeros(size, dtype=np.uint8)

    def in_pmem(self, addr, length=1):
        return self.base <= addr and addr + length <= self.base + self.size

    def _offset(self, addr, length):
        if length not in (1, 2, 4, 8):
            raise ValueError(f"Bad access length {length}")
        if not self.in_pmem(addr, length):
            raise MemoryAccessError(
                f"Address 0x{addr:08x} is out of bound of pmem "
                f"[0x{self.base:08x}, 0x{self.base + self.size - 1:08x}]")
        return addr - self.base

    def read(self, addr, length):
        off = self._offset(addr, length)
        return int.from_bytes(self.pmem[off:off + length].tobytes(), 'little')

    def write(self, addr, length, value):
        off = self._offset(addr, length)
        data = (value & ((1 << (8 * length)) - 1)).to_bytes(length, 'little')
        self.pmem[off:off + length] = np.frombuffer(data, dtype=np.uint8)

    def read_word(self, addr):
        """One machine word at *addr* (the ``*`` operator)."""
        return self.read(addr, WORD_BYTES)

    def write_word(self, addr, value):
        self.write(addr, WORD_BYTES, value)

    def load_image(self, path, addr=None):
        """Copy a raw binary file into memory.  Returns its size."""
        addr = self.base if addr is None else addr
        img = np.fromfile(path, dtype=np.uint8)
        if not self.in_pmem(addr, max(len(img), 1)):
            raise MemoryAccessError(
                f"Image {path} ({len(img)} bytes) does not fit at 0x{addr:08x}")
        off = addr - self.base
        self.pmem[off:off + len(img)] = img
        return len(img)


class Machine:
    """Registers + memory, wired into the expression evaluator."""

    def __init__(self, mem_size=MSIZE):
        self.regs = Registers()
        self.mem = PhysicalMemory(MBASE, mem_size)

    def evaluate(self, text):
        return evaluate(text, self.regs.lookup, self.mem.read_word)

    def try_evaluate(self, text):
        return try_evaluate(text, self.regs.lookup, self.mem.read_word)
