from collections import namedtuple

from . import config
from .decoder import decode_at
from .errors import Chip8Error, RomTooLarge, UnknownOpcode
from .executor import Executor
from .log import log
from .state import MachineState

CycleResult = namedtuple("CycleResult", "should_draw should_beep error")


class Chip8:
    """The CHIP-8 interpreter core.

    Owns one MachineState. The caller feeds it a ROM and key states, calls
    run_cycle() at whatever rate it likes (about 60 Hz for correct timers)
    and reads back the framebuffer and the draw/beep flags. Nothing in here
    touches a window, sound device or file.
    """

    def __init__(self, rng=None):
        self.state = MachineState()
        self.executor = Executor(self.state, rng)
        self.rom = b""

    # ---- Load ROM ----
    def load_rom(self, data):
        """Copy ROM bytes to 0x200. Raises RomTooLarge, leaving memory untouched."""
        data = bytes(data)
        if len(data) > config.max_rom_size:
            raise RomTooLarge(len(data), config.max_rom_size)
        self.state.memory.load(config.program_start, data)
        self.rom = data
        log("Loaded ROM: %d bytes" % len(data))

    def reset(self, reload_rom=True):
        """Explicit session reset. Reloads the last ROM unless told not to."""
        self.state.reset()
        if reload_rom and self.rom:
            self.state.memory.load(config.program_start, self.rom)
        else:
            self.rom = b""

    # ---- Input ----
    def set_keys(self, states):
        states = [bool(s) for s in states]
        if len(states) != config.key_count:
            raise ValueError("expected %d key states, got %d" % (config.key_count, len(states)))
        self.state.key_inputs = states

    def press_key(self, key):
        self.state.key_inputs[key] = True

    def release_key(self, key):
        self.state.key_inputs[key] = False

    # ---- Output ----
    def framebuffer(self):
        return bytes(self.state.display_buffer)

    def pixel(self, x, y):
        return self.state.display_buffer[y * config.width + x]

    @property
    def should_draw(self):
        return self.state.should_draw

    @property
    def should_beep(self):
        return self.state.should_beep

    # ---- Cycle ----
    def run_cycle(self):
        """Fetch, decode and execute one instruction, then step the timers.

        Errors never escape: they come back in CycleResult.error. An unknown
        opcode is stepped over. A fatal error leaves PC and the timers as they
        were before the cycle.
        """
        state = self.state
        state.should_draw = False
        state.should_beep = False
        start_pc = state.pc

        try:
            op = decode_at(state)
            try:
                self.executor.execute(op)
            except UnknownOpcode:
                state.pc = start_pc + 2  # step over it, or it runs forever
                raise
        except Chip8Error as e:
            log("[FAILED]", e)
            if e.fatal:
                state.pc = start_pc
                return CycleResult(state.should_draw, state.should_beep, e)
            error = e
        else:
            log("[OK] 0x%04X: %s" % (op.opcode, op.mnemonic()))
            error = None

        self._step_timers()
        return CycleResult(state.should_draw, state.should_beep, error)

    # ---- timers ----
    def _step_timers(self):
        state = self.state
        if state.delay_timer > 0:
            state.delay_timer -= 1
        if state.sound_timer > 0:
            state.should_beep = True
            state.sound_timer -= 1
