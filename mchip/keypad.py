#!/usr/bin/env python3

"""
Keypad Emulator

Sixteen key lines (0-F), each either held or released.  Input plugins set and
clear the lines between instructions; the CPU only ever reads them.

There is no debouncing or edge detection here.  Waiting for a key is
level-triggered, so a key held down from a previous frame counts as pressed.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import NUM_KEYS


class KeypadError(Exception):
    pass


class Keypad:
    def __init__(self):
        self.key_down = [False] * NUM_KEYS

    def _check_key(self, key):
        if not 0 <= key < NUM_KEYS:
            raise KeypadError("Key 0x{:x} is out of range (0x0-0x{:x})".format(key, NUM_KEYS - 1))

    def set_key(self, key, down):
        self._check_key(key)
        self.key_down[key] = bool(down)

    def press(self, key):
        self.set_key(key, True)

    def release(self, key):
        self.set_key(key, False)

    def release_all(self):
        self.key_down = [False] * NUM_KEYS

    def is_key_down(self, key):
        self._check_key(key)
        return self.key_down[key]

    def get_lowest_key_down(self):
        # Lowest-numbered key currently held, or None if nothing is held
        for key, down in enumerate(self.key_down):
            if down:
                return key

        return None
