"""
The legacy poll protocol.

Old style streams and futures are polled without a context::

    res = strm.poll()
    if res is NotReady:
        # current().notify() will be called when it's worth polling again
        ...
    elif res.value is sentinel:
        # no more items
        ...
    else:
        item = res.value

Failures aren't results in this protocol, ``poll()`` raises them.

Instead of a context there's an ambient *current task*, the one that is
doing the polling. It's installed with `running` and whoever needs to wake
the poller later calls ``current().notify()``::

    with running(Task(notify)):
        res = strm.poll()

This module adapts the context driven things to that: `Compat` for futures
(anything with ``poll(cx)``) and `LegacyStream` for streams (anything with
``poll_next(cx)``). Both build a context out of the current task and
translate the results.
"""
__all__ = [
    'NotReady', 'Task', 'current', 'running', 'Compat', 'LegacyStream', 'wait'
]

import contextlib
import threading

from costream.core.poll import Context, Pending, sentinel


class _NotReadyType(object):
    __slots__ = ()
    def __repr__(self):
        return 'NotReady'
    def __bool__(self):
        return False

NotReady = _NotReadyType()


class Task(object):
    """A handle on whoever polls. `notify` is called to get polled again."""
    __slots__ = ('notify',)

    def __init__(self, notify):
        self.notify = notify

    def __repr__(self):
        return "<%s at 0x%X notify:%r>" % (
            self.__class__.__name__,
            id(self),
            self.notify
        )

_local = threading.local()

def current():
    """Return the task installed by `running` in this thread."""
    task = getattr(_local, 'task', None)
    if task is None:
        raise RuntimeError(
            "No task is running: legacy polls must happen inside running().")
    return task

@contextlib.contextmanager
def running(task):
    """Install `task` as the current task of this thread."""
    prev = getattr(_local, 'task', None)
    _local.task = task
    try:
        yield task
    finally:
        _local.task = prev

def context():
    """Build a context that notifies the current task."""
    return Context(current().notify)


class Compat(object):
    """
    Wraps a future polled with a context (``poll(cx)``) so it can be polled
    the old way:

    * ``NotReady`` - not yet
    * ``Ready(value)`` - the result
    * a failure is raised
    """
    __slots__ = ('future',)

    def __init__(self, future):
        self.future = future

    def poll(self):
        res = self.future.poll(context())
        if res is Pending:
            return NotReady
        if res.exception is not None:
            raise res.exception
        return res

    def into_inner(self):
        return self.future

    def __repr__(self):
        return "<%s at 0x%X wrapping %r>" % (
            self.__class__.__name__,
            id(self),
            self.future
        )


class LegacyStream(object):
    """
    A stream with the legacy protocol, translated from ``poll_next(cx)``:

    * ``Pending`` becomes ``NotReady``
    * an item is ``Ready(item)``
    * the end is ``Ready(sentinel)``, there's no item with it
    * a failure is raised right away, it's not an item

    The stream is finished after the end or a failure, like with
    ``poll_next``.
    """
    __slots__ = ('stream',)

    def __init__(self, stream):
        self.stream = stream

    def poll(self):
        res = self.stream.poll_next(context())
        if res is Pending:
            return NotReady
        if res.exception is not None:
            raise res.exception
        return res

    def into_inner(self):
        return self.stream

    def __repr__(self):
        return "<%s at 0x%X wrapping %r>" % (
            self.__class__.__name__,
            id(self),
            self.stream
        )


def wait(strm):
    """
    Iterate a stream in a blocking fashion: poll it, and block the thread
    till it notifies when it isn't ready. Failures are raised from the
    iteration.

    `strm` can be a `LegacyStream` or anything `LegacyStream` can wrap.
    """
    if not isinstance(strm, LegacyStream):
        strm = LegacyStream(strm)
    notified = threading.Event()
    task = Task(notified.set)
    while True:
        notified.clear()
        with running(task):
            res = strm.poll()
        if res is NotReady:
            notified.wait()
            continue
        if res.value is sentinel:
            return
        yield res.value
