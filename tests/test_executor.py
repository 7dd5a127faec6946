import random

import pytest

from chip8vm import UnknownOpcode, decode


def execute(chip8, opcode):
    """Execute one opcode directly, bypassing fetch and timers."""
    chip8.executor.execute(decode(opcode, 0x200))


# ---- loads and arithmetic ----

@pytest.mark.parametrize("x", range(16))
def test_load_immediate_every_register(chip8, run, x):
    run(0x6000 | (x << 8) | 0xAB)
    assert chip8.state.gpio[x] == 0xAB


def test_add_immediate_wraps_without_flag(chip8, run):
    run(0x60FF, 0x7002)
    assert chip8.state.gpio[0] == 0x01
    assert chip8.state.gpio[0xF] == 0


def test_register_copy_and_logic(chip8, run):
    run(0x600C, 0x610A, 0x8210, 0x8301, 0x8100, 0x8302)
    gpio = chip8.state.gpio
    assert gpio[2] == 0x0A
    assert gpio[1] == 0x0C
    assert gpio[3] == 0x0C
    run(0x600C, 0x610A, 0x8013)
    assert chip8.state.gpio[0] == 0x0C ^ 0x0A


def test_add_with_carry_all_operands(chip8):
    gpio = chip8.state.gpio
    for a in range(256):
        for b in range(256):
            gpio[0], gpio[1] = a, b
            execute(chip8, 0x8014)
            assert gpio[0] == (a + b) % 256
            assert gpio[0xF] == (1 if a + b > 255 else 0)


def test_subtract_no_borrow_all_operands(chip8):
    gpio = chip8.state.gpio
    for a in range(256):
        for b in range(256):
            gpio[0], gpio[1] = a, b
            execute(chip8, 0x8015)
            assert gpio[0] == (a - b) % 256
            assert gpio[0xF] == (1 if a >= b else 0)


def test_reverse_subtract_no_borrow_all_operands(chip8):
    gpio = chip8.state.gpio
    for a in range(256):
        for b in range(256):
            gpio[0], gpio[1] = a, b
            execute(chip8, 0x8017)
            assert gpio[0] == (b - a) % 256
            assert gpio[0xF] == (1 if b >= a else 0)


def test_equal_operands_do_not_borrow(chip8):
    gpio = chip8.state.gpio
    gpio[2] = gpio[3] = 0x42
    execute(chip8, 0x8235)
    assert gpio[2] == 0 and gpio[0xF] == 1


def test_shift_right(chip8):
    gpio = chip8.state.gpio
    gpio[4], gpio[5] = 0x05, 0xFF
    execute(chip8, 0x8456)
    assert gpio[4] == 0x02 and gpio[0xF] == 1
    assert gpio[5] == 0xFF
    execute(chip8, 0x8456)
    assert gpio[4] == 0x01 and gpio[0xF] == 0


def test_shift_left(chip8):
    gpio = chip8.state.gpio
    gpio[4] = 0x81
    execute(chip8, 0x840E)
    assert gpio[4] == 0x02 and gpio[0xF] == 1
    execute(chip8, 0x840E)
    assert gpio[4] == 0x04 and gpio[0xF] == 0


def test_flag_wins_when_vf_is_the_target(chip8):
    gpio = chip8.state.gpio
    gpio[0xF], gpio[1] = 0x10, 0x02
    execute(chip8, 0x8F14)
    assert gpio[0xF] == 0


@pytest.mark.parametrize("opcode, vf, flag", [
    (0x8F15, 0x10, 1),  # 0x10 - 0x02, no borrow
    (0x8F16, 0x02, 0),  # low bit of 0x02
    (0x8F17, 0x10, 0),  # 0x02 - 0x10 borrows
    (0x8F1E, 0x40, 0),  # high bit of 0x40
])
def test_vf_target_keeps_flag_not_result(chip8, opcode, vf, flag):
    gpio = chip8.state.gpio
    gpio[0xF], gpio[1] = vf, 0x02
    execute(chip8, opcode)
    assert gpio[0xF] == flag


# ---- control flow ----

def test_jump(chip8, run):
    run(0x1ABC)
    assert chip8.state.pc == 0xABC


def test_jump_plus_v0(chip8, run):
    run(0x6010, 0xB300)
    assert chip8.state.pc == 0x310


def test_jump_plus_v0_masks_to_12_bits(chip8, run):
    run(0x60FF, 0xBFFF)
    assert chip8.state.pc == (0xFFF + 0xFF) & 0xFFF


@pytest.mark.parametrize("setup, opcode, skipped", [
    (0x6042, 0x3042, True),
    (0x6042, 0x3043, False),
    (0x6042, 0x4043, True),
    (0x6042, 0x4042, False),
    (0x6142, 0x5010, False),
    (0x6100, 0x5010, True),
    (0x6142, 0x9010, True),
    (0x6100, 0x9010, False),
])
def test_skips(chip8, run, setup, opcode, skipped):
    run(setup, opcode)
    assert chip8.state.pc == (0x206 if skipped else 0x204)


def test_call_and_return(chip8):
    chip8.load_rom(b"\x23\x00")
    chip8.state.memory[0x300] = 0x00
    chip8.state.memory[0x301] = 0xEE
    chip8.run_cycle()
    assert chip8.state.pc == 0x300
    assert chip8.state.stack.entries == [0x202]
    chip8.run_cycle()
    assert chip8.state.pc == 0x202
    assert len(chip8.state.stack) == 0


# ---- index, random, timers ----

def test_set_index(chip8, run):
    run(0xA123)
    assert chip8.state.index == 0x123


def test_random_is_masked(chip8, run):
    expected = random.Random(1234).getrandbits(8) & 0x0F
    run(0xC30F)
    assert chip8.state.gpio[3] == expected


def test_random_zero_mask(chip8, run):
    run(0xC300)
    assert chip8.state.gpio[3] == 0


def test_timer_registers(chip8, run):
    run(0x6020, 0xF015, 0xF018, 0xF207)
    # two decays happened after Fx15 before Fx07 ran
    assert chip8.state.gpio[2] == 0x20 - 2
    assert chip8.state.sound_timer == 0x20 - 2


def test_add_to_index_masks_and_keeps_vf(chip8):
    state = chip8.state
    state.index = 0xFFF
    state.gpio[1] = 2
    state.gpio[0xF] = 7
    execute(chip8, 0xF11E)
    assert state.index == 0x001
    assert state.gpio[0xF] == 7


def test_font_glyph_address(chip8, run):
    run(0x600A, 0xF029)
    assert chip8.state.index == 0xA * 5
    assert chip8.state.memory[chip8.state.index] == 0xF0


def test_bcd(chip8, run):
    run(0x60FF, 0xA300, 0xF033)
    mem = chip8.state.memory
    assert (mem[0x300], mem[0x301], mem[0x302]) == (2, 5, 5)
    run(0x6007, 0xA300, 0xF033)
    assert (mem[0x300], mem[0x301], mem[0x302]) == (0, 0, 7)


def test_store_and_load_registers(chip8):
    state = chip8.state
    for i in range(16):
        state.gpio[i] = i * 3
    state.index = 0x400
    execute(chip8, 0xF355)
    assert [state.memory[0x400 + i] for i in range(5)] == [0, 3, 6, 9, 0]
    assert state.index == 0x400
    state.gpio[:] = bytes(16)
    execute(chip8, 0xF265)
    assert list(state.gpio[:4]) == [0, 3, 6, 0]
    assert state.index == 0x400


def test_store_registers_wraps_address(chip8):
    state = chip8.state
    state.gpio[0], state.gpio[1] = 0x11, 0x22
    state.index = 0xFFF
    execute(chip8, 0xF155)
    assert state.memory[0xFFF] == 0x11
    assert state.memory[0x000] == 0x22


# ---- keys ----

def test_skip_if_key(chip8, run):
    chip8.press_key(0x5)
    run(0x6005, 0xE09E)
    assert chip8.state.pc == 0x206
    run(0x6005, 0xE0A1)
    assert chip8.state.pc == 0x204


def test_skip_if_not_key(chip8, run):
    run(0x6005, 0xE0A1)
    assert chip8.state.pc == 0x206
    run(0x6005, 0xE09E)
    assert chip8.state.pc == 0x204


def test_wait_for_key_does_not_block(chip8):
    chip8.load_rom(bytes([0xF3, 0x0A]))
    for _ in range(3):
        result = chip8.run_cycle()
        assert result.error is None
        assert chip8.state.pc == 0x200
    chip8.press_key(0xB)
    chip8.press_key(0xC)
    chip8.run_cycle()
    assert chip8.state.gpio[3] == 0xB
    assert chip8.state.pc == 0x202


# ---- display ----

def lit(chip8):
    return {(i % 64, i // 64) for i, p in enumerate(chip8.state.display_buffer) if p}


def test_draw_glyph(chip8, run):
    result = run(0xA000, 0x6000, 0x6100, 0xD015)  # glyph "0" at (0, 0)
    assert result.should_draw
    assert chip8.state.gpio[0xF] == 0
    expected = {(c, 0) for c in range(4)} | {(c, 4) for c in range(4)}
    expected |= {(0, r) for r in range(5)} | {(3, r) for r in range(5)}
    assert lit(chip8) == expected


def test_draw_twice_restores_and_collides(chip8, run):
    run(0xA000 + 5 * 8, 0x6014, 0x6109, 0xD015)
    first = lit(chip8)
    assert first
    assert chip8.state.gpio[0xF] == 0
    chip8.state.pc = 0x206
    result = chip8.run_cycle()
    assert result.should_draw
    assert lit(chip8) == set()
    assert chip8.state.gpio[0xF] == 1


def test_draw_without_overlap_has_no_collision(chip8, run):
    run(0xA000, 0x6000, 0x6100, 0xD015, 0x6010, 0xD015)
    assert chip8.state.gpio[0xF] == 0
    assert len(lit(chip8)) == 2 * 14


def test_draw_wraps_around_edges(chip8, run):
    chip8.state.memory[0x300] = 0xFF
    chip8.state.memory[0x301] = 0xFF
    run(0xA300, 0x603E, 0x611F, 0xD012)
    pixels = lit(chip8)
    assert (62, 31) in pixels and (63, 31) in pixels
    assert (0, 31) in pixels and (5, 31) in pixels
    assert (62, 0) in pixels and (5, 0) in pixels
    assert len(pixels) == 16


def test_draw_resets_vf_first(chip8, run):
    run(0x6F01, 0xA000, 0xD005)
    assert chip8.state.gpio[0xF] == 0


def test_clear_screen(chip8, run):
    result = run(0xA000, 0xD005, 0x00E0)
    assert result.should_draw
    assert lit(chip8) == set()


# ---- unknown opcodes ----

@pytest.mark.parametrize("opcode", [0x0000, 0x0123, 0x00E1, 0x01E0, 0x5121, 0x9121, 0x8008, 0x800F, 0xE000, 0xF0FF])
def test_unknown_opcode(chip8, run, opcode):
    result = run(opcode)
    assert isinstance(result.error, UnknownOpcode)
    assert not result.error.fatal
    assert result.error.opcode == opcode
    assert chip8.state.pc == 0x202


def test_unknown_opcode_raised_by_executor(chip8):
    with pytest.raises(UnknownOpcode):
        execute(chip8, 0x0234)


def test_bcd_wraps_address(chip8):
    state = chip8.state
    state.gpio[0] = 123
    state.index = 0xFFE
    execute(chip8, 0xF033)
    assert (state.memory[0xFFE], state.memory[0xFFF], state.memory[0x000]) == (1, 2, 3)


def test_draw_reads_sprite_across_address_wrap(chip8):
    state = chip8.state
    state.memory[0xFFF] = 0x80
    state.index = 0xFFF
    execute(chip8, 0xD012)  # second row comes from 0x000, the top of glyph "0"
    assert lit(chip8) == {(0, 0)} | {(c, 1) for c in range(4)}
    assert state.gpio[0xF] == 0
