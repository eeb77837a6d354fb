#!/usr/bin/env python3

"""
Host Loop

Drives the CPU in real time.  The CPU itself has no sense of time, so this is
where everything clock-related happens:

    * Instructions are executed at the configured clock speed (operations per
      second), or as fast as possible if the clock speed is 0
    * The delay and sound timers are counted down at 60Hz of wall-clock time,
      regardless of how fast instructions are executing
    * Inputs are polled and the display is refreshed at 60Hz
    * The buzzer is switched on and off to follow the sound timer
    * Frames and operations per second are reported once a second

Everything runs on a single thread, between instructions, so the CPU never
sees the keypad or framebuffer change part-way through an instruction.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from time import perf_counter
from .constants import DEFAULT_CLOCK_SPEED, DISPLAY_FREQ, TIMER_FREQ

DISPLAY_INTERVAL = 1.0 / DISPLAY_FREQ
TIMER_INTERVAL = 1.0 / TIMER_FREQ


class Host:
    def __init__(self, cpu, framebuffer, inputs, audio, clock_speed=None):
        self.cpu = cpu
        self.framebuffer = framebuffer
        self.inputs = inputs
        self.audio = audio

        if clock_speed is None:
            auto_clock_speed = DEFAULT_CLOCK_SPEED
        else:
            # User-specified clock speed (user can specify 0 for infinite)
            auto_clock_speed = clock_speed

        self.core_interval = None if auto_clock_speed <= 0 else 1.0 / auto_clock_speed

        # Audio-related vars
        self.buzzer_enabled = False

        # Timing-related vars
        self.next_display_update_time = 0
        self.next_timer_tick_time = None

        # Performance-related vars
        self.perf_counter_fps = 0
        self.perf_counter_ops = 0
        self.next_perf_report_time = 0

    def run(self):
        cpu = self.cpu

        while True:
            this_time = perf_counter()  # Do this first for maximum precision

            # Performance counters
            if this_time >= self.next_perf_report_time:
                self.next_perf_report_time = int(this_time) + 1.0
                # Reporting the performance should be done before a refresh, as refreshing will likely show the report
                self.framebuffer.report_perf(self.perf_counter_fps, self.perf_counter_ops)
                self.perf_counter_ops = 0
                self.perf_counter_fps = 0

            # Prevent unnecessary display rendering in excess of host frame rate
            if this_time >= self.next_display_update_time:
                if self.inputs.process_messages():  # Process inputs at 60Hz too, to avoid slowdown
                    self.refresh_framebuffer()
                    return

                self.next_display_update_time = this_time + DISPLAY_INTERVAL
                self.refresh_framebuffer()
                self.perf_counter_fps += 1

            # Count the timers down against actual time.  If the host gets lagged, the timers catch up in one go.
            if self.next_timer_tick_time is None:
                self.next_timer_tick_time = this_time + TIMER_INTERVAL

            while this_time >= self.next_timer_tick_time:
                cpu.tick_timers()
                self.next_timer_tick_time += TIMER_INTERVAL

            cpu.step()
            self.update_buzzer()

            if self.core_interval is not None:
                # Wait for next CPU instruction.  Do this last for maximum precision (takes into account time spent on
                # this instruction)
                next_time = this_time + self.core_interval

                while perf_counter() < next_time:  # Unfortunately we have to do this to get the timing right
                    pass

            self.perf_counter_ops += 1

    def update_buzzer(self):
        # Only call into the audio plugin when the tone actually starts or stops
        sound_active = self.cpu.sound_active()

        if sound_active != self.buzzer_enabled:
            self.audio.enable_buzzer(sound_active)
            self.buzzer_enabled = sound_active

    def refresh_framebuffer(self):
        # Render pending delta screen updates.  Should be called whenever there
        # will be a pause, a quit, or the display refresh interval expires.
        self.framebuffer.refresh_display()
