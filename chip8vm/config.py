# ---- Machine configuration ----
width, height = 64, 32
memory_size = 4096      # max 4096 bytes
program_start = 0x200   # ROMs are loaded here, the interpreter area is below
stack_depth = 16
register_count = 16
key_count = 16
max_rom_size = memory_size - program_start

# ---- Frontend configuration ----
scale = 10
window_width, window_height = width * scale, height * scale
cycle_hz = 60           # one cycle (and one timer step) per tick
beep_frequency = 440
beep_duration = 0.2
beep_pitch_variation = 15

# Standard CHIP-8 fontset (80 bytes), loaded at address 0
font_start = 0x000
glyph_size = 5
fontset = [
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80   # F
]
