from collections import namedtuple

from .errors import AddressError


class Instruction(namedtuple("Instruction", "address opcode family x y n nn nnn")):
    """A decoded 16-bit opcode and its operand fields.

    family -- top nibble, the instruction family (0x0..0xF)
    x, y   -- register indexes from bits 8-11 and 4-7
    n      -- low nibble
    nn     -- low byte, an immediate
    nnn    -- low 12 bits, an address or immediate
    """

    __slots__ = ()

    def mnemonic(self):
        """Opcode pattern for the trace log, e.g. ``6XNN`` or ``00EE``."""
        family = self.family
        if family == 0x0:
            return "%04X" % self.opcode if self.opcode in (0x00E0, 0x00EE) else "0NNN"
        if family in (0x1, 0x2, 0xA, 0xB):
            return "%XNNN" % family
        if family in (0x3, 0x4, 0x6, 0x7, 0xC):
            return "%XXNN" % family
        if family in (0x5, 0x8, 0x9):
            return "%XXY%X" % (family, self.n)
        if family == 0xD:
            return "DXYN"
        return "%XX%02X" % (family, self.nn)


def fetch(state):
    """Read the big-endian opcode at PC. PC is left alone."""
    pc = state.pc
    if pc + 1 >= len(state.memory):
        raise AddressError("PC", pc)
    return (state.memory[pc] << 8) | state.memory[pc + 1]


def decode(opcode, address=0):
    return Instruction(
        address,
        opcode,
        (opcode & 0xF000) >> 12,
        (opcode & 0x0F00) >> 8,
        (opcode & 0x00F0) >> 4,
        opcode & 0x000F,
        opcode & 0x00FF,
        opcode & 0x0FFF,
    )


def decode_at(state):
    return decode(fetch(state), state.pc)
