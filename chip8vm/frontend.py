# pyglet frontend: the window shows the framebuffer, the keyboard drives the
# keypad and a sine beep plays while the sound timer runs. The core itself
# never sees pyglet; this window just calls run_cycle() from the pyglet clock.

import random
import sys
from pathlib import Path

import pyglet
from pyglet.media import synthesis

from . import config
from .cpu import Chip8
from .errors import Chip8Error
from .log import log, set_logs, toggle_logs

# Key mapping - maps physical keyboard keys to CHIP-8 keypad
#   1 2 3 4        1 2 3 C
#   Q W E R   ->   4 5 6 D
#   A S D F        7 8 9 E
#   Z X C V        A 0 B F
keymap = {
    pyglet.window.key._1: 0x1, pyglet.window.key._2: 0x2, pyglet.window.key._3: 0x3, pyglet.window.key._4: 0xC,
    pyglet.window.key.Q: 0x4, pyglet.window.key.W: 0x5, pyglet.window.key.E: 0x6, pyglet.window.key.R: 0xD,
    pyglet.window.key.A: 0x7, pyglet.window.key.S: 0x8, pyglet.window.key.D: 0x9, pyglet.window.key.F: 0xE,
    pyglet.window.key.Z: 0xA, pyglet.window.key.X: 0x0, pyglet.window.key.C: 0xB, pyglet.window.key.V: 0xF,
}


class Chip8Window(pyglet.window.Window):
    def __init__(self, chip8, cycle_hz=config.cycle_hz):
        super().__init__(config.window_width, config.window_height, caption="CHIP-8 Emulator", resizable=False)
        self.chip8 = chip8
        self.has_exit = False
        self.sound_playing = False

        # Pre-create a pixel sprite for drawing
        self.pixel = pyglet.image.SolidColorImagePattern((255, 255, 255, 255)).create_image(config.scale, config.scale)

        pyglet.clock.schedule_interval(self._cpu_tick, 1.0 / cycle_hz)

    def _play_beep(self):
        freq = config.beep_frequency + random.randint(-config.beep_pitch_variation, config.beep_pitch_variation)
        wave = synthesis.Sine(duration=config.beep_duration, frequency=freq, sample_rate=44100)

        player = pyglet.media.Player()
        player.queue(wave)
        player.play()
        self.sound_playing = True

        def on_eos():
            self.sound_playing = False
            player.delete()

        player.on_eos = on_eos

    # ---- Input ----
    def on_key_press(self, symbol, modifiers):
        if symbol == pyglet.window.key.ESCAPE:
            self.close()
        if symbol in keymap:
            self.chip8.press_key(keymap[symbol])
        if symbol == pyglet.window.key.F1:
            print("logsOn:", toggle_logs())
        if symbol == pyglet.window.key.F5:
            self.chip8.reset()
            log("Session reset")

    def on_key_release(self, symbol, modifiers):
        if symbol in keymap:
            self.chip8.release_key(keymap[symbol])

    # ---- Drawing ----
    def on_draw(self):
        self.clear()
        width, height, scale = config.width, config.height, config.scale
        buf = self.chip8.state.display_buffer
        for i in range(width * height):
            if buf[i] == 1:
                x = (i % width) * scale
                y = (height - 1 - (i // width)) * scale
                self.pixel.blit(x, y)

    # ---- CPU cycle ----
    def _cpu_tick(self, dt):
        if self.has_exit:
            return
        result = self.chip8.run_cycle()
        if result.error is not None:
            if result.error.fatal:
                print("Emulation error:", result.error)
                self.has_exit = True
                self.close()
                return
            log("Skipped:", result.error)
        if result.should_beep and not self.sound_playing:
            self._play_beep()
        if result.should_draw:
            self.invalid = True

    def on_close(self):
        pyglet.clock.unschedule(self._cpu_tick)
        super().on_close()


# ---- Entry point ----
def main(argv=None):
    args = list(sys.argv[1:] if argv is None else argv)
    if "--logs" in args:
        args.remove("--logs")
        set_logs(True)
    if len(args) != 1:
        print("Usage: chip8vm <rom-file> [--logs]")
        sys.exit(1)

    rom = args[0]
    log("Loading ROM:", rom)
    chip8 = Chip8()
    try:
        chip8.load_rom(Path(rom).read_bytes())
    except (OSError, Chip8Error) as e:
        print("Could not load ROM:", e)
        sys.exit(1)

    Chip8Window(chip8)
    pyglet.app.run()


if __name__ == "__main__":
    main()
