"""
The polling vocabulary.

A poll is one synchronous attempt to advance something. It results in either
`Pending` (not yet, a waker has been parked) or a `Ready` instance holding a
value or an exception.

Streams report their end with ``Ready(sentinel)``, items can be anything
(``None`` included)::

    res = stream.poll_next(cx)
    if res is Pending:
        # cx.waker gets called when it's worth polling again
        ...
    elif res.exception is not None:
        # the producer failed
        ...
    elif res.value is sentinel:
        # no more items
        ...
    else:
        item = res.value
"""
__all__ = ['Pending', 'Ready', 'sentinel', 'Context']

from costream.core import events


class _PendingType(object):
    __slots__ = ()
    def __repr__(self):
        return 'Pending'
    def __bool__(self):
        return False

Pending = _PendingType()


class stream_sentinel(object):
    __slots__ = ()
    def __repr__(self):
        return '<end of stream>'

sentinel = stream_sentinel()


class Ready(object):
    __slots__ = ('value', 'exception')

    def __init__(self, value=None, exception=None):
        self.value = value
        self.exception = exception

    @property
    def ended(self):
        return self.exception is None and self.value is sentinel

    def result(self):
        """Return the value or raise the exception."""
        if self.exception is not None:
            raise self.exception
        return self.value

    def __eq__(self, other):
        if not isinstance(other, Ready):
            return NotImplemented
        return self.value == other.value and self.exception is other.exception

    def __ne__(self, other):
        eq = self.__eq__(other)
        return eq if eq is NotImplemented else not eq

    __hash__ = None

    def __repr__(self):
        if self.exception is not None:
            return 'Ready(exception=%r)' % (self.exception,)
        return 'Ready(%r)' % (self.value,)


class Context(object):
    """
    The wake-up context of a poll. Holds the `waker`, a callable that makes
    whoever polls poll again.

    When a coroutine being stepped yields, what it yielded is what it waits
    on and `park` hooks the waker on it:

    * ``None`` (a bare yield, eg: ``asyncio.sleep(0)``) - it only wants to
      give others a turn, wake right away
    * a `costream.core.events.Operation` - the operation's ``process``
      decides
    * anything with ``add_done_callback`` (asyncio futures) - wake when it's
      done

    Anything else raises `costream.core.events.BadYield`.
    """
    __slots__ = ('waker',)

    def __init__(self, waker):
        self.waker = waker

    def wake(self):
        self.waker()

    def park(self, yielded):
        if yielded is None:
            self.waker()
        elif isinstance(yielded, events.Operation):
            yielded.process(self)
        elif hasattr(yielded, 'add_done_callback'):
            waker = self.waker
            yielded.add_done_callback(lambda fut: waker())
        else:
            raise events.BadYield("Can't wait on %r." % (yielded,))

    def __repr__(self):
        return "<%s at 0x%X waker:%r>" % (
            self.__class__.__name__,
            id(self),
            self.waker
        )
