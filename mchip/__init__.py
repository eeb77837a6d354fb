#!/usr/bin/env python3

"""
Main Startup Module

Simply call main(args) to start the emulator, replacing args with a dictionary
of options.  This can be done via the Terminal or GUI.

All options must be supplied.  Defaults can be specified with a 'None'.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import APP_INTRO, APP_COPYRIGHT, MEMORY_SIZE, STACK_SIZE
from .cpu import CPU, CPUError
from .framebuffer import Framebuffer
from .host import Host
from .hostio import Loader
from .inputs.i_null import InputsError
from .keypad import Keypad, KeypadError
from .ram import RAM, RAMError
from .renderers.r_null import RendererError
from .stack import Stack, StackError


class StartupError(Exception):
    pass


# Everything that should stop the emulator with a message, rather than a traceback
EMULATION_ERRORS = (
    OSError, StartupError, CPUError, RAMError, StackError, KeypadError, InputsError, RendererError
)


def main(args):
    print("".join((APP_INTRO, APP_COPYRIGHT)))
    opt_renderer = args["renderer"]
    auto_select_renderer = opt_renderer is None  # If necessary, try PyGame first, then Curses.
    mute_audio = args["mute"]

    # flake8: noqa: F401
    if auto_select_renderer or opt_renderer == "pygame":
        # pylint: disable=unused-import, import-outside-toplevel, raise-missing-from
        try:
            import pygame
        except ImportError:
            if auto_select_renderer:
                opt_renderer = "curses"
            else:
                raise StartupError(
                    "PyGame does not appear to be installed."
                )
        else:
            from .inputs.i_pygame import Inputs
            from .renderers.r_pygame import Renderer

            if mute_audio:
                from .audio.a_null import Audio
            else:
                from .audio.a_pygame import Audio

    if opt_renderer == "curses":
        # pylint: disable=unused-import, import-outside-toplevel, raise-missing-from
        try:
            import curses
        except ImportError:
            if auto_select_renderer:
                raise StartupError(
                    "Neither PyGame nor Curses (or Windows-Curses) appear to be installed."
                )

            raise StartupError(
                "Curses (or Windows-Curses) does not appear to be installed."
            )
        else:
            from .inputs.i_curses import Inputs
            from .renderers.r_curses import Renderer

            # Terminals can handle fixed-length beeps, but not sampled sound
            if mute_audio or mute_audio is None:
                from .audio.a_null import Audio
            else:
                from .audio.a_curses import Audio

    if opt_renderer == "null":
        # pylint: disable=import-outside-toplevel
        from .inputs.i_null import Inputs
        from .renderers.r_null import Renderer
        from .audio.a_null import Audio

    # Read the ROM binary before opening any window, so a missing file fails cleanly
    program = Loader().load_binary(args["filename"])

    # Allocate memory and a non-shared CPU stack in host memory
    ram = RAM()
    ram.resize(MEMORY_SIZE)
    stack = Stack(STACK_SIZE)
    keypad = Keypad()

    # Set up a new rendering system
    renderer = Renderer(
        scale=args["scale"],
        pygame_palette=args["pygame_palette"],
        curses_cursor_mode=args["curses_cursor_mode"],
        smoothing=args["smoothing"]
    )
    inputs = None
    audio = None

    try:
        # Initialise framebuffer and attach to rendering system
        framebuffer = Framebuffer(renderer)

        # Set up host inputs, and link to the chosen rendering module in case it provides inputs too
        inputs = Inputs(args["keymap"], renderer, keypad)
        audio = Audio()

        # Create a new CPU, plug it into the rest of the system, and write the program into RAM
        jump_quirks = args["jump_quirks"]
        cpu = CPU(ram, stack, framebuffer, keypad, jump_quirks=None if jump_quirks is None else bool(jump_quirks))
        cpu.load_program(program)

        Host(cpu, framebuffer, inputs, audio, clock_speed=args["clock_speed"]).run()
    finally:
        # The CPU has quit, so shut down the rendering framework.  __del__ cannot be relied upon when using PyPy
        if audio is not None:
            audio.shutdown()

        if inputs is not None:
            inputs.shutdown()

        renderer.shutdown()
