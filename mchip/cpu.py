#!/usr/bin/env python3

"""
CPU Emulator (CHIP-8)

Like a real computer, this is where most of the processing happens.  Each call
to step() fetches, decodes and executes exactly one instruction.  The CPU does
no I/O and never waits: pacing, timer countdown, input polling and rendering
are all left to the host, which calls step() and tick_timers() at whatever
rates it has been configured for.

Instructions are decoded with two dictionary lookups.  The first nibble
selects a bitmask, and the masked opcode selects the handler.  Anything not in
the table is an illegal opcode.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from random import Random
from .constants import (
    ADDRESS_MASK, FONT_GLYPH_SIZE, FONT_LOCATION, MEMORY_SIZE, NUM_KEYS, PROGRAM_START, SYSTEM_FONT
)
from .ram import OversizedProgram
from .stack import StackError

CPU_ENDIAN = "big"  # CHIP-8 is big-endian
INDEX_MASK = 0xFFFF


class CPUError(Exception):
    pass


class IllegalOpcode(CPUError):
    def __init__(self, opcode, pc, state=None):
        self.opcode = opcode
        self.pc = pc
        message = "Opcode 0x{:04x} at address 0x{:03x} is not a recognised instruction".format(opcode, pc)

        if state:
            message = "{}\n\n{}".format(message, state)

        super().__init__(message)


class InvalidKeyIndex(CPUError):
    def __init__(self, key, pc):
        self.key = key
        self.pc = pc
        super().__init__(
            "Key 0x{:02x} requested at address 0x{:03x} is out of range (0x0-0x{:x})".format(key, pc, NUM_KEYS - 1)
        )


class CPU:
    def __init__(self, ram, stack, framebuffer, keypad, jump_quirks=None, rng=None):
        # Addresses wrap at ADDRESS_MASK, so anything other than the full 4K would fault part-way through an instruction
        if ram.mem_size != MEMORY_SIZE:
            raise CPUError(
                "RAM must be 0x{:x} bytes, not 0x{:x}".format(MEMORY_SIZE, ram.mem_size)
            )

        self.ram = ram
        self.stack = stack
        self.framebuffer = framebuffer
        self.keypad = keypad
        self.rng = Random() if rng is None else rng

        # Jump quirks: Bnnn jumps relative to Vx rather than V0, as on CHIP-48 and Super-CHIP.  Disabled by default.
        self.jump_quirks = False if jump_quirks is None else jump_quirks

        # Bitmask used for the second lookup, by first nibble.  Nibbles not listed need no second discriminator.
        # n = Nibble
        # kk = Byte
        # nnn = address
        # x/y = register (0-15)
        self.family_masks = {
            0x0: 0xFFFF,  # Exact match
            0x5: 0xF00F,
            0x8: 0xF00F,
            0x9: 0xF00F,
            0xE: 0xF0FF,
            0xF: 0xF0FF
        }

        self.instructions = {
            0x00E0: self._00E0,
            0x00EE: self._00EE,
            0x1000: self._1nnn,
            0x2000: self._2nnn,
            0x3000: self._3xkk,
            0x4000: self._4xkk,
            0x5000: self._5xy0,
            0x6000: self._6xkk,
            0x7000: self._7xkk,
            0x8000: self._8xy0,
            0x8001: self._8xy1,
            0x8002: self._8xy2,
            0x8003: self._8xy3,
            0x8004: self._8xy4,
            0x8005: self._8xy5,
            0x8006: self._8xy6,
            0x8007: self._8xy7,
            0x800E: self._8xyE,
            0x9000: self._9xy0,
            0xA000: self._Annn,
            0xB000: self._Bnnn,
            0xC000: self._Cxkk,
            0xD000: self._Dxyn,
            0xE09E: self._Ex9E,
            0xE0A1: self._ExA1,
            0xF007: self._Fx07,
            0xF00A: self._Fx0A,
            0xF015: self._Fx15,
            0xF018: self._Fx18,
            0xF01E: self._Fx1E,
            0xF029: self._Fx29,
            0xF033: self._Fx33,
            0xF055: self._Fx55,
            0xF065: self._Fx65
        }

        # Initialise registers
        self.v = memoryview(bytearray(16))  # Bytearrays are mutable, so this should be fast when a register is updated
        self.i = 0  # Index register

        # Initialise timers
        self.dt = 0  # Delay timer
        self.st = 0  # Sound timer

        # Initialise program counter and current opcode
        self.pc = PROGRAM_START
        self.debug_pc = PROGRAM_START
        self.opcode = 0

        # The font sits in the reserved area below the program
        self.ram.write_block(FONT_LOCATION, SYSTEM_FONT)

    def load_program(self, program):
        # Check first, so an oversized program can never spill over the top of memory
        available = self.ram.mem_size - PROGRAM_START

        if len(program) > available:
            raise OversizedProgram(len(program), available)

        self.ram.write_block(PROGRAM_START, program)

    def step(self):
        # Keep track of the program counter before altering it, so a failed instruction can be reported and undone
        pc = self.pc
        self.debug_pc = pc
        self.opcode = self.fetch()
        self.inc_pc()  # Program counter updates after fetch, but before execute

        try:
            self.decode(self.opcode)()
        except (CPUError, StackError):
            self.pc = pc
            raise

    def tick_timers(self):
        # Called by the host at 60Hz, never by the CPU itself
        if self.dt > 0:
            self.dt -= 1

        if self.st > 0:
            self.st -= 1

    def sound_active(self):
        return self.st > 0

    def fetch(self):
        pc = self.pc
        return int.from_bytes(
            bytes((self.ram.read(pc), self.ram.read((pc + 1) & ADDRESS_MASK))), CPU_ENDIAN, signed=False
        )

    def decode(self, opcode):
        instruction = self.instructions.get(opcode & self.family_masks.get(opcode >> 12, 0xF000))

        if instruction is None:
            raise IllegalOpcode(opcode, self.debug_pc, self.describe_state())

        return instruction

    def inc_pc(self):
        self.pc = (self.pc + 2) & ADDRESS_MASK

    def dec_pc(self):
        # Only used to re-run instructions (e.g. keypress wait).
        self.pc = (self.pc - 2) & ADDRESS_MASK

    def describe_state(self):
        # Register and stack dump for crash reports.  Registers run from Vf down to V0.
        stack_items = self.stack.get_items()
        stack_str = (" 0x{:03x}" * len(stack_items)).format(*stack_items)

        return (
            "V: 0x" + ("{:02x}" * 16) + " I: 0x{:04x} DT: 0x{:02x} ST: 0x{:02x} PC: 0x{:03x} OP: 0x{:04x}\nStack:{}"
        ).format(
            *[self.v[reg_num] for reg_num in range(15, -1, -1)] +
            [self.i, self.dt, self.st, self.debug_pc, self.opcode, stack_str or " (Empty)"]
        )

    # References to Vx, Vy, byte and addr are always in the same opcode position throughout all instructions, so avoid
    # excessive code duplication.  Don't reference these more than necessary as they are recalculated each time.
    @property
    def vx(self):
        return (self.opcode & 0xF00) >> 8

    @property
    def vy(self):
        return (self.opcode & 0xF0) >> 4

    @property
    def addr(self):
        return self.opcode & 0xFFF

    @property
    def byte(self):
        return self.opcode & 0xFF

    @property
    def nibble(self):
        return self.opcode & 0xF

    def _00E0(self):  # CLS
        self.framebuffer.clear()

    def _00EE(self):  # RET
        self.pc = self.stack.pop()

    def _1nnn(self):  # JP addr
        self.pc = self.addr

    def _2nnn(self):  # CALL addr
        self.stack.push(self.pc)
        self.pc = self.addr

    def _3xkk(self):  # SE Vx, byte
        if self.v[self.vx] == self.byte:
            self.inc_pc()

    def _4xkk(self):  # SNE Vx, byte
        if self.v[self.vx] != self.byte:
            self.inc_pc()

    def _5xy0(self):  # SE Vx, Vy
        if self.v[self.vx] == self.v[self.vy]:
            self.inc_pc()

    def _6xkk(self):  # LD Vx, byte
        self.v[self.vx] = self.byte

    def _7xkk(self):  # ADD Vx, byte
        # No carry flag for the immediate form
        vx = self.vx
        self.v[vx] = (self.v[vx] + self.byte) & 0xFF

    def _8xy0(self):  # LD Vx, Vy
        self.v[self.vx] = self.v[self.vy]

    def _8xy1(self):  # OR Vx, Vy
        self.v[self.vx] |= self.v[self.vy]

    def _8xy2(self):  # AND Vx, Vy
        self.v[self.vx] &= self.v[self.vy]

    def _8xy3(self):  # XOR Vx, Vy
        self.v[self.vx] ^= self.v[self.vy]

    # For the flag-setting instructions below, Vf is always written last.  If Vf is also the destination register,
    # the flag wins, and it is never left holding a stale value.

    def _8xy4(self):  # ADD Vx, Vy
        val = self.v[self.vx] + self.v[self.vy]
        self.v[self.vx] = val & 0xFF
        self.v[0xF] = int(val > 0xFF)  # Vf is set when carrying

    def _post_8xy5_8xy7(self, val):  # Post-SUB/SUBN
        self.v[self.vx] = val & 0xFF
        self.v[0xF] = int(val >= 0)  # Vf is set when NOT borrowing

    def _8xy5(self):  # SUB Vx, Vy
        self._post_8xy5_8xy7(self.v[self.vx] - self.v[self.vy])

    def _8xy6(self):  # SHR Vx
        val = self.v[self.vx]
        self.v[self.vx] = val >> 1
        self.v[0xF] = val & 1  # Bit shifted out

    def _8xy7(self):  # SUBN Vx, Vy
        self._post_8xy5_8xy7(self.v[self.vy] - self.v[self.vx])

    def _8xyE(self):  # SHL Vx
        val = self.v[self.vx]
        self.v[self.vx] = (val << 1) & 0xFF
        self.v[0xF] = val >> 7  # Bit shifted out

    def _9xy0(self):  # SNE Vx, Vy
        if self.v[self.vx] != self.v[self.vy]:
            self.inc_pc()

    def _Annn(self):  # LD I, addr
        self.i = self.addr

    def _Bnnn(self):  # JP V0, addr
        # This quirk breaks lots of games if set incorrectly, so it is left to the user.
        vr = self.vx if self.jump_quirks else 0
        self.pc = (self.v[vr] + self.addr) & ADDRESS_MASK

    def _Cxkk(self):  # RND Vx, byte
        # The ANDing here is intentional.  This is not a random number between 0 and 'byte' inclusive.
        self.v[self.vx] = self.rng.randint(0, 0xFF) & self.byte

    def _Dxyn(self):  # DRW Vx, Vy, nibble
        # Sprites are 8 pixels wide and 'nibble' rows high.  Every pixel wraps around the screen edges individually,
        # and each row starts again from the base X coordinate.
        height = self.nibble
        vx_pos = self.v[self.vx]
        vy_pos = self.v[self.vy]
        collided = False
        i = self.i

        for y in range(height):
            spr_data = self.ram.read((i + y) & ADDRESS_MASK)

            for x in range(8):
                if spr_data & (0x80 >> x):
                    # Don't stop drawing on a collision.  Set the flag, and never unset it for this sprite.
                    if self.framebuffer.xor_pixel(vx_pos + x, vy_pos + y):
                        collided = True

        self.v[0xF] = int(collided)

    def _key_index(self):
        key = self.v[self.vx]

        if key >= NUM_KEYS:
            raise InvalidKeyIndex(key, self.debug_pc)

        return key

    def _Ex9E(self):  # SKP Vx
        if self.keypad.is_key_down(self._key_index()):
            self.inc_pc()

    def _ExA1(self):  # SKNP Vx
        if not self.keypad.is_key_down(self._key_index()):
            self.inc_pc()

    def _Fx07(self):  # LD Vx, DT
        self.v[self.vx] = self.dt

    def _Fx0A(self):  # LD Vx, K
        # This opcode waits for a keypress, but since the timers still need to count down and the framebuffer still
        # needs updating, we return control to the host and simply decrement the incremented program counter.  The
        # instruction then runs again on the next step, until a key is held.
        key = self.keypad.get_lowest_key_down()

        if key is None:
            self.dec_pc()
        else:
            self.v[self.vx] = key

    def _Fx15(self):  # LD DT, Vx
        self.dt = self.v[self.vx]

    def _Fx18(self):  # LD ST, Vx
        self.st = self.v[self.vx]

    def _Fx1E(self):  # ADD I, Vx
        # No overflow flag
        self.i = (self.i + self.v[self.vx]) & INDEX_MASK

    def _Fx29(self):  # LD F, Vx
        self.i = FONT_LOCATION + FONT_GLYPH_SIZE * (self.v[self.vx] & 0xF)

    def _Fx33(self):  # LD B, Vx
        val = self.v[self.vx]
        i = self.i
        self.ram.write(i & ADDRESS_MASK, val // 100)              # Most-significant digit
        self.ram.write((i + 1) & ADDRESS_MASK, (val // 10) % 10)  # Middle digit
        self.ram.write((i + 2) & ADDRESS_MASK, val % 10)          # Least-significant digit

    def _Fx55(self):  # LD [I], Vx
        i = self.i

        # Ensure with +1 that the final register is copied
        for reg in range(self.vx + 1):
            self.ram.write((i + reg) & ADDRESS_MASK, self.v[reg])

    def _Fx65(self):  # LD Vx, [I]
        i = self.i

        for reg in range(self.vx + 1):
            self.v[reg] = self.ram.read((i + reg) & ADDRESS_MASK)
