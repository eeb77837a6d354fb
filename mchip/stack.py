#!/usr/bin/env python3

"""
Stack Emulator

There is no specified location in RAM for the call stack, and no stack pointer
register is exposed to the running program, so the stack lives in host memory
as a wrapped list.  The list length doubles as the stack pointer.

Running out of stack is fatal in both directions.  Programs that call too
deeply, or return without a matching call, raise an error instead of quietly
wrapping the stack pointer round and corrupting the return addresses.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class StackError(Exception):
    pass


class StackOverflow(StackError):
    pass


class StackUnderflow(StackError):
    pass


class Stack:
    def __init__(self, size):
        self.items = []
        self.size = size

    def push(self, item):
        # Fetching the stack size with 'len' should be immediate, so no slow loop
        if len(self.items) >= self.size:
            raise StackOverflow("Stack overflow ({} levels deep)".format(self.size))

        self.items.append(item)

    def pop(self):
        try:
            return self.items.pop()
        except IndexError:
            raise StackUnderflow("Stack underflow (return with no matching call)") from None

    def get_pointer(self):
        return len(self.items)

    def get_items(self):
        # For crash reports
        return self.items
