from .cpu import Chip8, CycleResult
from .decoder import Instruction, decode, fetch
from .errors import (AddressError, Chip8Error, RomTooLarge, StackOverflow,
                     StackUnderflow, UnknownOpcode)
from .state import MachineState

__version__ = "0.1.0"
