"""Errors signalled by the CHIP-8 core.

Fatal errors mean the ROM (or the engine) is broken and the session should
usually stop. Non-fatal errors are reported and emulation can carry on.
"""


class Chip8Error(Exception):
    fatal = True


class UnknownOpcode(Chip8Error):
    fatal = False

    def __init__(self, opcode, address):
        super().__init__("Unknown opcode: %04X at 0x%03X" % (opcode, address))
        self.opcode = opcode
        self.address = address


class StackOverflow(Chip8Error):
    def __init__(self, address):
        super().__init__("Stack overflow on CALL at 0x%03X" % address)
        self.address = address


class StackUnderflow(Chip8Error):
    def __init__(self, address):
        super().__init__("Stack underflow on 00EE at 0x%03X" % address)
        self.address = address


class AddressError(Chip8Error):
    def __init__(self, what, address):
        super().__init__("%s out of bounds: 0x%X" % (what, address))
        self.address = address


class RomTooLarge(Chip8Error):
    def __init__(self, size, capacity):
        super().__init__("ROM too large: %d bytes, max %d" % (size, capacity))
        self.size = size
        self.capacity = capacity
