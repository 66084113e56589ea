"""
A module for quick importing the essential core stuff.
(stream, AsyncStream, Scheduler, block_on, events, poll, compat, priority)
"""
from .core.stream import stream, debug_stream, AsyncStream, Sender
from .core.schedulers import Scheduler, block_on
from .core import events
from .core import poll
from .core import compat
from .core.poll import Pending, Ready, Context, sentinel
from .core.util import priority
