import random

import pytest

from chip8vm import Chip8
import chip8vm.log as chip8_log


def rom(*opcodes):
    """Assemble 16-bit opcodes into big-endian ROM bytes."""
    return b"".join(op.to_bytes(2, "big") for op in opcodes)


@pytest.fixture
def chip8():
    return Chip8(rng=random.Random(1234))


@pytest.fixture
def run(chip8):
    """Load the given opcodes and run one cycle per opcode."""
    def _run(*opcodes):
        chip8.load_rom(rom(*opcodes))
        chip8.state.pc = 0x200
        results = [chip8.run_cycle() for _ in opcodes]
        return results[-1] if results else None
    return _run


@pytest.fixture(autouse=True)
def quiet_logs():
    chip8_log.set_logs(False)
    yield
    chip8_log.set_logs(False)
