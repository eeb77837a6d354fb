#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from mchip.audio.a_null import Audio
from mchip.constants import DEFAULT_KEYMAP
from mchip.cpu import CPU, IllegalOpcode
from mchip.framebuffer import Framebuffer
from mchip.host import Host
from mchip.inputs.i_null import Inputs
from mchip.keypad import Keypad
from mchip.ram import RAM
from mchip.renderers.r_null import Renderer
from mchip.stack import Stack


class QuittingInputs(Inputs):
    # Asks the host to quit after a fixed number of 60Hz polls
    def __init__(self, keymap, renderer, keypad, polls):
        super().__init__(keymap, renderer, keypad)
        self.polls = polls

    def process_messages(self):
        self.polls -= 1
        return self.polls < 0


class RecordingAudio(Audio):
    def __init__(self):
        super().__init__()
        self.calls = []

    def enable_buzzer(self, enabled):
        self.calls.append(enabled)
        super().enable_buzzer(enabled)


class TestHost(unittest.TestCase):
    def setUp(self):
        ram = RAM()
        ram.resize(0x1000)
        self.renderer = Renderer()
        self.framebuffer = Framebuffer(self.renderer)
        self.keypad = Keypad()
        self.cpu = CPU(ram, Stack(16), self.framebuffer, self.keypad)
        self.audio = RecordingAudio()

    def _make_host(self, polls, clock_speed=0):
        inputs = QuittingInputs(DEFAULT_KEYMAP, self.renderer, self.keypad, polls)
        return Host(self.cpu, self.framebuffer, inputs, self.audio, clock_speed=clock_speed)

    def test_host_clock_speed(self):
        self.assertAlmostEqual(0.001, self._make_host(0, clock_speed=None).core_interval)
        self.assertAlmostEqual(0.002, self._make_host(0, clock_speed=500).core_interval)
        self.assertIsNone(self._make_host(0, clock_speed=0).core_interval)

    def test_host_quit_before_first_step(self):
        self.cpu.load_program(b"\x12\x00")
        self._make_host(0).run()
        self.assertEqual(0x200, self.cpu.pc)
        self.assertEqual("MiniChip Emulator - 0 FPS, 0 OPS", self.renderer.title)

    def test_host_runs_program(self):
        # LD V0, 0x05 / LD V1, 0x01 / JP 0x204
        self.cpu.load_program(b"\x60\x05\x61\x01\x12\x04")
        self._make_host(1).run()
        self.assertEqual(0x05, self.cpu.v[0x0])
        self.assertEqual(0x01, self.cpu.v[0x1])
        self.assertEqual(0x204, self.cpu.pc)

    def test_host_buzzer_follows_sound_timer(self):
        # LD V0, 0xFF / LD ST, V0 / JP 0x204
        self.cpu.load_program(b"\x60\xFF\xF0\x18\x12\x04")
        self._make_host(1).run()
        self.assertEqual([True], self.audio.calls)
        self.assertTrue(self.audio.buzzer_enabled)
        self.assertGreater(self.cpu.st, 0xF0)

    def test_host_buzzer_stops(self):
        # LD V0, 0x01 / LD ST, V0 / JP 0x204
        self.cpu.load_program(b"\x60\x01\xF0\x18\x12\x04")
        self._make_host(3).run()
        self.assertEqual(0, self.cpu.st)
        self.assertEqual([True, False], self.audio.calls)

    def test_host_counts_down_delay_timer(self):
        # LD V0, 0xFF / LD DT, V0 / JP 0x204
        self.cpu.load_program(b"\x60\xFF\xF0\x15\x12\x04")
        self._make_host(3).run()
        self.assertLess(self.cpu.dt, 0xFF)

    def test_host_illegal_opcode(self):
        self.cpu.load_program(b"\xFF\xFF")
        self.assertRaises(IllegalOpcode, self._make_host(5).run)
