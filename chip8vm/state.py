# CHIP-8 machine state:
# Memory - 4096 bytes which hold the font (at 0x000), the reserved interpreter
# area (up to 0x1FF) and the ROM (from 0x200).
# Registers - 16 general purpose 8-bit registers V0..VF. VF is ALSO the
# carry / borrow / collision flag, so 8xy4, 8xy5, 8xy6, 8xy7, 8xyE and Dxyn
# overwrite it. Don't keep data in VF across those instructions.
# I - 16-bit index register (memory pointer), masked to 12 bits as an address.
# Stack - up to 16 return addresses.
# Timers - delay and sound, counting down to 0 once per cycle.

from . import config
from .errors import AddressError, StackOverflow, StackUnderflow


class Memory:
    """Byte-addressed RAM that refuses any access outside ``[0, size)``."""

    def __init__(self, size=config.memory_size):
        self.data = bytearray(size)

    def __len__(self):
        return len(self.data)

    def _check(self, address):
        if not 0 <= address < len(self.data):
            raise AddressError("Memory address", address)

    def __getitem__(self, address):
        self._check(address)
        return self.data[address]

    def __setitem__(self, address, value):
        self._check(address)
        self.data[address] = value & 0xFF

    def load(self, start, data):
        end = start + len(data)
        if start < 0 or end > len(self.data):
            raise AddressError("Memory range end", end)
        self.data[start:end] = data

    def clear(self):
        self.data[:] = bytes(len(self.data))


class Stack:
    """Fixed-depth LIFO of return addresses."""

    def __init__(self, depth=config.stack_depth):
        self.depth = depth
        self.entries = []

    def __len__(self):
        return len(self.entries)

    def push(self, address, pc):
        if len(self.entries) >= self.depth:
            raise StackOverflow(pc)
        self.entries.append(address)

    def pop(self, pc):
        if not self.entries:
            raise StackUnderflow(pc)
        return self.entries.pop()

    def clear(self):
        self.entries.clear()


class MachineState:
    def __init__(self):
        self.memory = Memory()
        self.gpio = bytearray(config.register_count)  # V0..VF
        self.index = 0                                # I register
        self._pc = config.program_start
        self.stack = Stack()
        self.delay_timer = 0
        self.sound_timer = 0
        self.key_inputs = [False] * config.key_count
        self.display_buffer = bytearray(config.width * config.height)
        self.should_draw = False
        self.should_beep = False
        self.load_font()

    def load_font(self):
        self.memory.load(config.font_start, bytes(config.fontset))

    def reset(self):
        """Back to power-on: font loaded, everything else zeroed, PC = 0x200."""
        self.memory.clear()
        self.load_font()
        self.gpio[:] = bytes(len(self.gpio))
        self.index = 0
        self._pc = config.program_start
        self.stack.clear()
        self.delay_timer = 0
        self.sound_timer = 0
        self.key_inputs = [False] * config.key_count
        self.clear_display()
        self.should_draw = False
        self.should_beep = False

    @property
    def pc(self):
        return self._pc

    @pc.setter
    def pc(self, value):
        if not 0 <= value < len(self.memory):
            raise AddressError("PC", value)
        self._pc = value

    def clear_display(self):
        self.display_buffer[:] = bytes(len(self.display_buffer))
