# Opcode handlers. Reference: Cowgod's CHIP-8 Technical Reference
# http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
#
# Dispatch is two-level: the family table is keyed by the top nibble, and
# families 0x0, 0x8, 0xE and 0xF look the rest up in their own table. A miss
# at either level raises UnknownOpcode, nothing falls through to a sibling.
#
# Handlers never write PC directly. They start with next_pc pointing past the
# instruction; jumps and calls overwrite it, skips add another 2, and the
# result is stored into PC once the handler returns.

import random

from . import config
from .errors import UnknownOpcode
from .log import log


class Executor:
    def __init__(self, state, rng=None):
        self.state = state
        self.rng = rng if rng is not None else random.Random()
        self.setup_funcmap()

    # ---- Opcode function map ----
    def setup_funcmap(self):
        self.funcmap = {
            0x0: self._0xxx,  # 00E0 / 00EE - Clear screen / Return from subroutine
            0x1: self._1nnn,  # 1nnn - Jump to a specific memory address
            0x2: self._2nnn,  # 2nnn - Call a function (subroutine) at a memory address
            0x3: self._3xnn,  # 3xnn - Skip next instruction if a register equals a specific number
            0x4: self._4xnn,  # 4xnn - Skip next instruction if a register does NOT equal a number
            0x5: self._5xy0,  # 5xy0 - Skip next instruction if two registers are equal
            0x6: self._6xnn,  # 6xnn - Set a register to a specific number
            0x7: self._7xnn,  # 7xnn - Add a number to a register
            0x8: self._8xxx,  # 8xy0..8xyE - Math and logic operations between two registers
            0x9: self._9xy0,  # 9xy0 - Skip next instruction if two registers are NOT equal
            0xA: self._Annn,  # Annn - Set the memory pointer (I) to a specific address
            0xB: self._Bnnn,  # Bnnn - Jump to an address plus the value of register V0
            0xC: self._Cxnn,  # Cxnn - Set a register to a random number ANDed with a value
            0xD: self._Dxyn,  # Dxyn - Draw a sprite on the screen at Vx, Vy
            0xE: self._Exxx,  # Ex9E / ExA1 - Skip next instruction if a key is pressed or not pressed
            0xF: self._Fxxx,  # Fx07..Fx65 - timers, memory storage, and waiting for keys
        }
        self.funcmap_0 = {
            0xE0: self._00E0,
            0xEE: self._00EE,
        }
        self.funcmap_8 = {
            0x0: self._8xy0,
            0x1: self._8xy1,
            0x2: self._8xy2,
            0x3: self._8xy3,
            0x4: self._8xy4,
            0x5: self._8xy5,
            0x6: self._8xy6,
            0x7: self._8xy7,
            0xE: self._8xyE,
        }
        self.funcmap_E = {
            0x9E: self._Ex9E,
            0xA1: self._ExA1,
        }
        self.funcmap_F = {
            0x07: self._Fx07,
            0x0A: self._Fx0A,
            0x15: self._Fx15,
            0x18: self._Fx18,
            0x1E: self._Fx1E,
            0x29: self._Fx29,
            0x33: self._Fx33,
            0x55: self._Fx55,
            0x65: self._Fx65,
        }

    def execute(self, op):
        self.next_pc = op.address + 2
        self.funcmap[op.family](op)
        self.state.pc = self.next_pc

    @staticmethod
    def _sub(table, key, op):
        handler = table.get(key)
        if handler is None:
            raise UnknownOpcode(op.opcode, op.address)
        handler(op)

    def _skip(self):
        self.next_pc += 2

    # ---- Opcode Handlers ----

    # 00E0 / 00EE. 0nnn (SYS) is a machine code call and is not supported.
    def _0xxx(self, op):
        if op.x != 0:
            raise UnknownOpcode(op.opcode, op.address)
        self._sub(self.funcmap_0, op.nn, op)

    def _00E0(self, op):
        # CLS
        self.state.clear_display()
        self.state.should_draw = True
        log("Clear the display (all pixels turned off)")

    def _00EE(self, op):
        # RET
        addr = self.state.stack.pop(op.address)
        self.next_pc = addr
        log("Return to", hex(addr))

    # 1nnn - Jump to address NNN
    def _1nnn(self, op):
        self.next_pc = op.nnn
        log("Jump to address", hex(op.nnn))

    # 2nnn - Call subroutine at NNN
    def _2nnn(self, op):
        self.state.stack.push(self.next_pc, op.address)
        self.next_pc = op.nnn
        log("Call subroutine at", hex(op.nnn))

    # 3xnn - Skip next instruction if Vx == nn
    def _3xnn(self, op):
        if self.state.gpio[op.x] == op.nn:
            self._skip()
            log(f"Skip next instruction: V{op.x:X} == {op.nn}")

    # 4xnn - Skip next instruction if Vx != nn
    def _4xnn(self, op):
        if self.state.gpio[op.x] != op.nn:
            self._skip()
            log(f"Skip next instruction: V{op.x:X} != {op.nn}")

    # 5xy0 - Skip next instruction if Vx == Vy
    def _5xy0(self, op):
        if op.n != 0:
            raise UnknownOpcode(op.opcode, op.address)
        if self.state.gpio[op.x] == self.state.gpio[op.y]:
            self._skip()
            log(f"Skip next instruction: V{op.x:X} == V{op.y:X}")

    # 6xnn - Set Vx = nn
    def _6xnn(self, op):
        self.state.gpio[op.x] = op.nn
        log(f"Set V{op.x:X} = {op.nn}")

    # 7xnn - Add immediate, no carry flag
    def _7xnn(self, op):
        gpio = self.state.gpio
        gpio[op.x] = (gpio[op.x] + op.nn) & 0xFF
        log(f"Add {op.nn} to V{op.x:X}: {gpio[op.x]}")

    # 8xy0..8xyE
    # VF is written after the result in 4, 5, 6, 7 and E on purpose, so when
    # x == F the register ends up holding the flag, not the result.
    def _8xxx(self, op):
        self._sub(self.funcmap_8, op.n, op)

    def _8xy0(self, op):
        gpio = self.state.gpio
        gpio[op.x] = gpio[op.y]
        log(f"Copy V{op.y:X} ({gpio[op.y]}) into V{op.x:X}")

    def _8xy1(self, op):
        gpio = self.state.gpio
        gpio[op.x] |= gpio[op.y]
        log(f"V{op.x:X} = V{op.x:X} OR V{op.y:X} -> {gpio[op.x]}")

    def _8xy2(self, op):
        gpio = self.state.gpio
        gpio[op.x] &= gpio[op.y]
        log(f"V{op.x:X} = V{op.x:X} AND V{op.y:X} -> {gpio[op.x]}")

    def _8xy3(self, op):
        gpio = self.state.gpio
        gpio[op.x] ^= gpio[op.y]
        log(f"V{op.x:X} = V{op.x:X} XOR V{op.y:X} -> {gpio[op.x]}")

    def _8xy4(self, op):
        gpio = self.state.gpio
        s = gpio[op.x] + gpio[op.y]
        gpio[op.x] = s & 0xFF
        gpio[0xF] = 1 if s > 0xFF else 0
        log(f"Add V{op.y:X} to V{op.x:X}: result {gpio[op.x]}, carry={gpio[0xF]}")

    def _8xy5(self, op):
        gpio = self.state.gpio
        vx, vy = gpio[op.x], gpio[op.y]
        gpio[op.x] = (vx - vy) & 0xFF
        gpio[0xF] = 1 if vx >= vy else 0
        log(f"Subtract V{op.y:X} from V{op.x:X}: result {gpio[op.x]}, NOT borrow={gpio[0xF]}")

    def _8xy6(self, op):
        gpio = self.state.gpio
        vx = gpio[op.x]
        gpio[op.x] = vx >> 1
        gpio[0xF] = vx & 1
        log(f"Shift V{op.x:X} right by 1: {gpio[op.x]}, least significant bit={gpio[0xF]}")

    def _8xy7(self, op):
        gpio = self.state.gpio
        vx, vy = gpio[op.x], gpio[op.y]
        gpio[op.x] = (vy - vx) & 0xFF
        gpio[0xF] = 1 if vy >= vx else 0
        log(f"Set V{op.x:X} = V{op.y:X} - V{op.x:X}: result {gpio[op.x]}, NOT borrow={gpio[0xF]}")

    def _8xyE(self, op):
        gpio = self.state.gpio
        vx = gpio[op.x]
        gpio[op.x] = (vx << 1) & 0xFF
        gpio[0xF] = (vx >> 7) & 1
        log(f"Shift V{op.x:X} left by 1: {gpio[op.x]}, most significant bit={gpio[0xF]}")

    # 9xy0 - Skip next instruction if Vx != Vy
    def _9xy0(self, op):
        if op.n != 0:
            raise UnknownOpcode(op.opcode, op.address)
        if self.state.gpio[op.x] != self.state.gpio[op.y]:
            self._skip()
            log(f"Skip next instruction: V{op.x:X} != V{op.y:X}")

    # Annn - Set I = NNN
    def _Annn(self, op):
        self.state.index = op.nnn
        log(f"Set I = {op.nnn:03X}")

    # Bnnn - Jump to address NNN + V0
    def _Bnnn(self, op):
        self.next_pc = (op.nnn + self.state.gpio[0]) & 0xFFF
        log(f"Jump to address V0 + {op.nnn:03X} = {self.next_pc:03X}")

    # Cxnn - Vx = random byte AND nn
    def _Cxnn(self, op):
        self.state.gpio[op.x] = self.rng.getrandbits(8) & op.nn
        log(f"Set V{op.x:X} = random_byte & {op.nn} -> {self.state.gpio[op.x]}")

    # Dxyn - DRW Vx, Vy, nibble
    # Sprites are XORed onto the screen, wrapping at the edges. VF = 1 if
    # any lit pixel gets switched off.
    def _Dxyn(self, op):
        state = self.state
        memory = state.memory
        buf = state.display_buffer
        width, height = config.width, config.height
        x = state.gpio[op.x]
        y = state.gpio[op.y]
        state.gpio[0xF] = 0
        collision = 0
        for row in range(op.n):
            sprite = memory[(state.index + row) & 0xFFF]
            if sprite == 0:
                continue
            base = ((y + row) % height) * width
            for col in range(8):
                if sprite & (0x80 >> col):
                    idx = base + (x + col) % width
                    if buf[idx] == 1:
                        collision = 1
                    buf[idx] ^= 1
        state.gpio[0xF] = collision
        state.should_draw = True
        log(f"Drew sprite, collision={collision}")

    # Ex9E / ExA1 - SKP / SKNP
    def _Exxx(self, op):
        self._sub(self.funcmap_E, op.nn, op)

    def _key(self, op):
        return self.state.gpio[op.x] & 0xF

    def _Ex9E(self, op):
        if self.state.key_inputs[self._key(op)]:
            self._skip()
            log(f"Skip next instruction: key {self._key(op):X} pressed")

    def _ExA1(self, op):
        if not self.state.key_inputs[self._key(op)]:
            self._skip()
            log(f"Skip next instruction: key {self._key(op):X} not pressed")

    # Fx07..Fx65 - timers, memory, I, and key input
    def _Fxxx(self, op):
        self._sub(self.funcmap_F, op.nn, op)

    def _Fx07(self, op):
        self.state.gpio[op.x] = self.state.delay_timer
        log(f"Set V{op.x:X} = delay timer {self.state.delay_timer}")

    def _Fx0A(self, op):
        # LD Vx, K: wait for a key press without blocking
        state = self.state
        for i, pressed in enumerate(state.key_inputs):
            if pressed:
                state.gpio[op.x] = i
                log(f"Key {i:X} pressed, stored in V{op.x:X}")
                return
        self.next_pc = op.address  # run this instruction again next cycle

    def _Fx15(self, op):
        self.state.delay_timer = self.state.gpio[op.x]
        log(f"Set delay timer = {self.state.delay_timer}")

    def _Fx18(self, op):
        self.state.sound_timer = self.state.gpio[op.x]
        log(f"Set sound timer = {self.state.sound_timer}")

    def _Fx1E(self, op):
        self.state.index = (self.state.index + self.state.gpio[op.x]) & 0xFFF
        log(f"Add V{op.x:X} to I: {self.state.index:03X}")

    def _Fx29(self, op):
        self.state.index = config.font_start + self.state.gpio[op.x] * config.glyph_size
        log(f"Set I = glyph {self.state.gpio[op.x]:X} at {self.state.index:03X}")

    def _Fx33(self, op):
        state = self.state
        val = state.gpio[op.x]
        state.memory[state.index & 0xFFF] = val // 100
        state.memory[(state.index + 1) & 0xFFF] = (val // 10) % 10
        state.memory[(state.index + 2) & 0xFFF] = val % 10
        log(f"Store BCD of {val} at {state.index:03X}")

    def _Fx55(self, op):
        state = self.state
        for i in range(op.x + 1):
            state.memory[(state.index + i) & 0xFFF] = state.gpio[i]
        log(f"Store V0..V{op.x:X} at {state.index:03X}")

    def _Fx65(self, op):
        state = self.state
        for i in range(op.x + 1):
            state.gpio[i] = state.memory[(state.index + i) & 0xFFF]
        log(f"Load V0..V{op.x:X} from {state.index:03X}")
