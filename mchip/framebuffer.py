#!/usr/bin/env python3

"""
Framebuffer Emulator

Pixels are written here, and are usually only drawn to the actual display (the
host rendering system) at 60Hz.  Each changed pixel is passed straight on to
the renderer, which buffers it until the next refresh, so no rendering library
is called thousands of times a second.

Programs for this system cannot write directly into video RAM.  Instead,
sprites are XORed onto the screen a pixel at a time, and the screen can be
cleared in one go.  Coordinates always wrap around the screen edges.

A collision is reported whenever a lit pixel is switched off by an XOR.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import APP_NAME, VID_WIDTH, VID_HEIGHT
from .ram import RAM


class Framebuffer:
    def __init__(self, renderer, vid_width=VID_WIDTH, vid_height=VID_HEIGHT):
        self.renderer = renderer
        self.vram = RAM()
        self.content_changed = False
        self.resize_vid(vid_width, vid_height)
        self.report_perf()

    def resize_vid(self, vid_width, vid_height):
        self.vid_width = vid_width
        self.vid_height = vid_height
        self.vid_size = vid_width * vid_height
        self.vram.resize(self.vid_size)
        self.renderer.set_resolution(vid_width, vid_height)
        self.content_changed = True

    def clear(self):
        self.vram.clear()

        for y in range(self.vid_height):
            for x in range(self.vid_width):
                self.renderer.set_pixel(x, y, False)

        self.content_changed = True

    def xor_pixel(self, x, y):
        # Flips a single pixel and returns whether a lit pixel was switched off
        x %= self.vid_width
        y %= self.vid_height
        vram_loc = y * self.vid_width + x
        pixel = self.vram.read(vram_loc)
        collision = (pixel != 0)
        new_pixel = pixel ^ 0xFF
        self.vram.write(vram_loc, new_pixel)
        self.renderer.set_pixel(x, y, new_pixel != 0)
        self.content_changed = True

        return collision

    def is_pixel_set(self, x, y):
        return self.vram.read(y * self.vid_width + x) != 0

    def snapshot(self):
        # Immutable copy of the screen, row by row, for hosts that render elsewhere
        vid_width = self.vid_width
        vram = bytes(self.vram.mem)

        return tuple(
            tuple(vram[row + x] != 0 for x in range(vid_width))
            for row in range(0, self.vid_size, vid_width)
        )

    def refresh_display(self):
        self.renderer.refresh_display(self.content_changed)
        self.content_changed = False

    def get_vid_size(self):
        return self.vid_width, self.vid_height

    def report_perf(self, fps=0, ops=0):
        title = "{} - {} FPS, {} OPS".format(APP_NAME, fps, ops)
        self.renderer.set_title(title)
