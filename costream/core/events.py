"""
Base events (coroutine operations) and stream exceptions.
"""
__all__ = [
    'StreamFinished', 'SlotOverflow', 'ItemLost', 'BadYield',
    'Operation', 'SenderFuture', 'Signal', 'WaitForSignal'
]
import threading

RUNNING, FINALIZED = range(2)


class StreamFinished(RuntimeError):
    """Raised when a stream is polled after it reported its end or its
    failure."""
    __doc_all__ = []

class SlotOverflow(RuntimeError):
    "Raised in a strict stream's producer when it sends twice without a poll."
    __doc_all__ = []

class ItemLost(RuntimeError):
    """Raised by a strict stream when the producer completed with an item
    nobody took. The exception message will be the item."""
    __doc_all__ = []
    @property
    def item(self):
        return self.args[0]

class BadYield(RuntimeError):
    """Thrown back in a coroutine that yielded something the context can't
    park a waker on."""
    __doc_all__ = []


class Operation(object):
    """All operations derive from this.

    An operation is awaited from a coroutine. While it isn't ready it yields
    itself up to whatever steps the coroutine, and the wake-up context calls
    `process` on it so it can register the waker. When it's ready the await
    returns `finalize()`.

    Eg:

    .. sourcecode:: python

        result = await SomeOperation()

    Generator based coroutines use ``result = yield from SomeOperation()``.

    Note: you don't really use this, this is for subclassing for other
    operations.
    """
    __slots__ = ['state']

    def __init__(self):
        self.state = RUNNING

    def ready(self):
        """Checked every time the coroutine gets to the operation. Subclasses
        usualy overwrite this."""
        return False

    def process(self, cx):
        """This is called when the coroutine yielded the operation and is
        parked. Code here should arrange for ``cx.waker`` to be called when the
        operation can make progress."""

    def finalize(self):
        """Called just before the await returns. Return value is the value
        actualy returned from the await. Subclasses might overwrite this method
        and call it from the superclass."""
        self.state = FINALIZED
        return self

    def __await__(self):
        while not self.ready():
            yield self
        return self.finalize()
    __iter__ = __await__


class SenderFuture(Operation):
    """
    Returned by `Sender.send`. It is pending exactly once: the first time
    the coroutine gets to it it yields, the second time it's ready.

    The yield is what hands control back to the stream so it can take the
    item out of the slot before the producer goes on. There's no wake-up to
    arrange, the stream reports the item on the same poll.
    """
    __slots__ = ['is_ready']

    def __init__(self):
        super(SenderFuture, self).__init__()
        self.is_ready = False

    def ready(self):
        if self.is_ready:
            return True
        self.is_ready = True
        return False

    def finalize(self):
        super(SenderFuture, self).finalize()

    def __repr__(self):
        return '<%s at 0x%X ready:%s>' % (
            self.__class__.__name__,
            id(self),
            self.is_ready
        )


class Signal(object):
    """
    A one shot signal. Coroutines waiting on it resume when it's set.

    Usage:

    .. sourcecode:: python

        sig = Signal()

        value = await sig.wait()  # or just: await sig
        ...
        nr = sig.set(value)

    * nr - the number of waiters woken up
    * value - object that the waiting coroutines recieve when they are
      resumed.

    `set` can be called from other threads.
    """
    __slots__ = ['value', 'is_set', 'wakers', 'lock']

    def __init__(self):
        self.value = None
        self.is_set = False
        self.wakers = []
        self.lock = threading.Lock()

    def add_waker(self, waker):
        """Park the waker. Returns False if the signal is already set (the
        waker isn't kept in that case)."""
        with self.lock:
            if self.is_set:
                return False
            self.wakers.append(waker)
            return True

    def set(self, value=None):
        with self.lock:
            if self.is_set:
                return 0
            self.value = value
            self.is_set = True
            wakers, self.wakers = self.wakers, []
        for waker in wakers:
            waker()
        return len(wakers)

    def wait(self):
        return WaitForSignal(self)

    def __await__(self):
        return self.wait().__await__()

    def __repr__(self):
        return "<%s at 0x%X set:%s waiters:%s>" % (
            self.__class__.__name__,
            id(self),
            self.is_set,
            len(self.wakers)
        )

class WaitForSignal(Operation):
    """The coroutine will resume when the signal is set.

    Eg:

    .. sourcecode:: python

        value = await WaitForSignal(sig)

    * value - a object sent with the signal.

    See: `Signal <costream.core.events.Signal.html>`_
    """
    __slots__ = ['signal']

    def __init__(self, signal):
        super(WaitForSignal, self).__init__()
        self.signal = signal

    def ready(self):
        return self.signal.is_set

    def process(self, cx):
        """Park the context's waker in the signal."""
        if not self.signal.add_waker(cx.waker):
            cx.wake()

    def finalize(self):
        super(WaitForSignal, self).finalize()
        return self.signal.value

    def __repr__(self):
        return "<%s at 0x%X signal:%r>" % (
            self.__class__.__name__,
            id(self),
            self.signal
        )
