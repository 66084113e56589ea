"""A stream fed by a coroutine.

Your average example::

    @stream
    async def producer(y):
        for i in range(100):
            await y.send(i)

    async def consumer():
        async for val in producer():
            # do something with val
            ...

The producer gets a `Sender` as its first argument. Every ``y.send(item)``
puts the item in a one item slot and returns a `SenderFuture`, which is
pending exactly once: awaiting it gets control back to the stream, the
stream takes the item out of the slot and reports it. Other things the
producer awaits leave the slot empty, so the stream reports `Pending`
instead.

The producer returns None when it's done or raises to fail the stream.

Note that there's no buffering:

  * a second ``send`` before the stream took the first item replaces it
  * an item sent right before the producer returns (without awaiting the
    `SenderFuture`) is never reported, the end wins

Both drop the item with a ``RuntimeWarning``. Set ``strict`` on the stream
to get `SlotOverflow` and `ItemLost` errors instead.
"""
__all__ = ['Slot', 'Sender', 'AsyncStream', 'Next', 'stream', 'debug_stream']

import asyncio
import functools
import threading
import warnings
import weakref

from costream.core import compat, coroutines, events
from costream.core.poll import Context, Pending, Ready, sentinel

class Slot(object):
    """Holds at most one item, shared by a stream and its sender."""
    __slots__ = ('item', 'full', 'lock')

    def __init__(self):
        self.item = None
        self.full = False
        self.lock = threading.Lock()

    def put(self, item, replace=True):
        """Store the item, returns True if the slot held an unread item. That
        item is overwritten only if `replace` is set."""
        with self.lock:
            was_full = self.full
            if replace or not was_full:
                self.item, self.full = item, True
        return was_full

    def take(self):
        """Return a (full, item) pair and empty the slot."""
        with self.lock:
            full, item = self.full, self.item
            self.item, self.full = None, False
        return full, item

    def __repr__(self):
        return "<%s at 0x%X %s>" % (
            self.__class__.__name__,
            id(self),
            "item: %r" % (self.item,) if self.full else "empty"
        )

class Sender(object):
    """Passed as the first argument to the producer, use it to send items to
    the stream.

    Senders are made by the stream and can't be copied: there's exactly one
    producer for a slot."""
    __slots__ = ('slot', 'stream', '__weakref__')

    def __init__(self, slot, stream=None):
        self.slot = slot
        self.stream = weakref.ref(stream) if stream is not None else None

    def _clone(self):
        clone = self.__class__(self.slot)
        clone.stream = self.stream
        return clone

    @property
    def strict(self):
        stream = self.stream() if self.stream is not None else None
        return stream is not None and stream.strict

    def send(self, item):
        """Send one item to the stream. Await the result."""
        strict = self.strict
        if self.slot.put(item, replace=not strict):
            if strict:
                raise events.SlotOverflow(
                    "%r sent before the stream took the previous item." % (
                        item,))
            warnings.warn(
                "Unread item overwritten by %r. Await the send() result "
                "before sending again." % (item,),
                RuntimeWarning, stacklevel=2)
        return events.SenderFuture()

    def __copy__(self):
        raise TypeError("%s objects can't be copied." % self.__class__.__name__)

    def __deepcopy__(self, memo):
        raise TypeError("%s objects can't be copied." % self.__class__.__name__)

    def __reduce_ex__(self, protocol):
        raise TypeError("%s objects can't be pickled." % self.__class__.__name__)

    def __repr__(self):
        return "<%s at 0x%X slot:%r>" % (
            self.__class__.__name__,
            id(self),
            self.slot
        )

class AsyncStream(object):
    """
    An abstraction around a coroutine, where the coroutine can internally
    loop and send items.

    Usage:

    .. sourcecode:: python

        strm = AsyncStream(producer, *args, **kwargs)

    * producer - called once, right away, with a `Sender` and the rest of
      the arguments. Must return a coroutine, a generator or an awaitable.

    Settings (instance attributes):

    * strict - raise `SlotOverflow` in the producer on a double send and
      fail the stream with `ItemLost` if the producer ends with an item in
      the slot. Off by default: the item is dropped with a warning.
    * debug - trace every step of the producer on stderr.

    The stream can be polled with the current protocol (`poll_next`), the
    legacy one (`compat`, `wait`), awaited with `next` or iterated with
    ``async for``.
    """
    strict = False

    def __init__(self, producer, *args, **kwargs):
        self.item = Sender(Slot(), self)
        sender = self.item._clone()
        self.fut = coroutines.CoroutineFuture(producer(sender, *args, **kwargs))
        self.finished = False
        self.polling = False

    debug = property(
        lambda self: self.fut.debug,
        lambda self, value: setattr(self.fut, 'debug', value)
    )

    def poll_next(self, cx):
        """
        Poll the producer once with the context `cx`:

        * ``Ready(item)`` - the producer sent an item
        * ``Ready(sentinel)`` - the producer returned, there are no more items
        * ``Ready(exception=exc)`` - the producer failed with `exc`
        * ``Pending`` - the producer waits on something else, the waker in
          `cx` will be called when it's worth polling again

        After the end or a failure the stream is finished and polling it again
        raises `StreamFinished`.
        """
        if self.finished:
            raise events.StreamFinished("%r polled after it finished." % self)
        if self.polling:
            raise RuntimeError("%r is already being polled." % self)
        self.polling = True
        try:
            res = self.fut.poll(cx)
        finally:
            self.polling = False
        if res is Pending:
            # Pending is either the SenderFuture or whatever else the producer
            # waits on. Only the SenderFuture leaves an item in the slot.
            full, item = self.item.slot.take()
            if full:
                return Ready(item)
            return Pending
        self.finished = True
        full, item = self.item.slot.take()
        if res.exception is not None:
            if full and not self.strict:
                warnings.warn(
                    "Item %r lost, the producer failed right after sending "
                    "it." % (item,), RuntimeWarning, stacklevel=2)
            return res
        if res.value is not None:
            return Ready(exception=RuntimeError(
                "Stream producers must return None, got %r." % (res.value,)))
        if full:
            if self.strict:
                return Ready(exception=events.ItemLost(item))
            warnings.warn(
                "Item %r lost, the producer ended right after sending it." % (
                    item,),
                RuntimeWarning, stacklevel=2)
        return Ready(sentinel)

    def compat(self):
        """Return a view of this stream with the legacy poll protocol."""
        return compat.LegacyStream(self)

    def wait(self):
        """Iterate the stream synchronously, blocking the thread between
        polls."""
        return compat.wait(self)

    def next(self, *default):
        """Return an operation that, awaited, gives the next item.

        At the end it returns `default` or raises StopAsyncIteration if there's
        no default. Awaiting it after the stream finished keeps giving the
        end."""
        return Next(self, *default)

    def __aiter__(self):
        return self

    def __anext__(self):
        if coroutines.ident() is not None:
            return Next(self)
        return self._aio_next()

    async def _aio_next(self):
        """Poll the stream from an asyncio task, waiting on a loop future
        between polls."""
        loop = asyncio.get_running_loop()
        while not self.finished:
            woken = loop.create_future()
            res = self.poll_next(Context(
                functools.partial(loop.call_soon_threadsafe, _set_once, woken)))
            if res is Pending:
                await woken
                continue
            if res.exception is not None:
                raise res.exception
            if res.value is sentinel:
                break
            return res.value
        raise StopAsyncIteration

    def close(self):
        """Stop the producer where it's suspended. The stream is finished
        afterwards."""
        self.finished = True
        self.fut.close()

    async def aclose(self):
        self.close()

    def __repr__(self):
        return "<%s at 0x%X %s producer:%s>" % (
            self.__class__.__name__,
            id(self),
            "finished" if self.finished else "active",
            self.fut.name
        )

def _set_once(fut):
    if not fut.done():
        fut.set_result(None)

class Next(events.Operation):
    """
    Get the next item from a stream. You don't need to use this, use
    ``await stream.next()`` or ``async for``.

    Polls the stream every time the awaiting coroutine is parked on it, with
    the awaiting coroutine's context. Any costream executor will do.
    """
    __slots__ = ['stream', 'default', 'result']

    def __init__(self, stream, *default):
        super(Next, self).__init__()
        self.stream = stream
        self.default = default
        self.result = Pending

    def ready(self):
        if self.stream.finished and self.result is Pending:
            self.result = Ready(sentinel)
        return self.result is not Pending

    def process(self, cx):
        self.result = self.stream.poll_next(cx)
        if self.result is not Pending:
            cx.wake()

    def finalize(self):
        super(Next, self).finalize()
        res = self.result
        if res.exception is not None:
            raise res.exception
        if res.value is sentinel:
            if self.default:
                return self.default[0]
            raise StopAsyncIteration
        return res.value

    def __repr__(self):
        return "<%s at 0x%X stream:%r result:%r>" % (
            self.__class__.__name__,
            id(self),
            self.stream,
            self.result
        )


class StreamFunction(object):
    """
    A decorator for producers. Calling the decorated function returns a new
    `AsyncStream`. Example::

        @stream
        async def countdown(y, start):
            while start:
                await y.send(start)
                start -= 1

        strm = countdown(10)
    """
    __slots__ = ('wrapped_func', 'constructor', 'debug')

    def __init__(self, func, constructor=AsyncStream, debug=False):
        self.wrapped_func = func
        self.constructor = constructor
        self.debug = debug

    @property
    def __name__(self):
        return self.wrapped_func.__name__

    def __repr__(self):
        return "<%s at 0x%08X wrapping %r>" % (
            self.__class__.__name__,
            id(self),
            self.wrapped_func,
        )
    __str__ = __repr__

    def __get__(self, instance, owner):
        """
        Decorating methods with a class needs that class to be a descriptor
        as the __call__ doesn't get automaticaly binded to the instance as
        functions do. The method gets the instance, then the sender.
        """
        if instance is None:
            return self
        return self.__class__(
            self.wrapped_func.__get__(instance, owner),
            self.constructor,
            self.debug
        )

    def __call__(self, *args, **kwargs):
        "Return a AsyncStream instance"
        inst = self.constructor(self.wrapped_func, *args, **kwargs)
        if self.debug:
            inst.debug = True
        return inst

stream = StreamFunction

def debug_stream(func):
    return StreamFunction(func, debug=True)
