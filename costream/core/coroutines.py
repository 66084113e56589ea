"""
Coroutine related boilerplate and wrappers.
"""
__all__ = ['CoroutineFuture']

import sys
import threading
import traceback

from costream.core.poll import Pending, Ready

_local = threading.local()

def ident():
    """Return the future being stepped in this thread, None outside a step."""
    return getattr(_local, "ident", None)

class CoroutineFuture(object):
    '''
    A future driven by stepping a coroutine.

    We need a wrapper for coroutines, generators and awaitables alike
    because we want to poll them all the same way: one `poll` is one step
    (a ``send`` or a ``throw``), and we do the exception handling here.

    While a step runs `ident()` returns the running future (per thread).
    '''
    STATE_RUNNING, STATE_COMPLETED, STATE_FAILED = range(3)
    _state_names = "RUNNING", "COMPLETED", "FAILED"
    __slots__ = (
        'name', 'state', 'coro', 'result', 'exception', 'lastop', 'debug',
        '__weakref__',
    )
    running = property(lambda self: self.state == self.STATE_RUNNING)

    def __init__(self, coro):
        self.debug = False
        self.result = None
        self.exception = None
        if not self._valid_gen(coro) and hasattr(coro, '__await__'):
            coro = coro.__await__()
        if not self._valid_gen(coro):
            self.state = self.STATE_FAILED
            self.exception = ValueError("Bad coroutine: %r" % (coro,))
            raise self.exception
        self.state = self.STATE_RUNNING
        self.name = getattr(coro, '__qualname__', None) or \
            getattr(coro, '__name__', None) or coro.__class__.__name__
        self.coro = coro

    def _valid_gen(self, coro):
        return hasattr(coro, 'send') and hasattr(coro, 'throw')

    def poll(self, cx):
        """
        Step the coroutine once:

        * if the coroutine returns, set STATE_COMPLETED and return a
          `Ready` with the return value

        * if any exception is raised (except the ones that stop the
          interpreter), set STATE_FAILED and return a `Ready` holding it

        * if it yields, park the context's waker on what it yielded and
          return `Pending`. If parking raises (eg: `BadYield`, the context
          can't make sense of the yielded thing) the exception is thrown
          back in the coroutine.
        """
        assert self.state == self.STATE_RUNNING, \
            "%s polled, coroutine state (%s) should be %s!" % (
                self,
                self._state_names[self.state],
                self._state_names[self.STATE_RUNNING]
            )
        exc = None
        while True:
            rop = self.step(exc)
            if rop is not None:
                return rop
            yielded, exc = self.lastop, None
            if self.debug:
                print("Yields %r." % (yielded,), file=sys.stderr)
            try:
                cx.park(yielded)
            except Exception as e:
                exc = e
                continue
            return Pending

    def step(self, exc=None):
        """Run the coroutine till it yields (returns None, the yielded value
        is kept as `lastop`) or ends (returns a `Ready`)."""
        if self.debug:
            print(file=sys.stderr)
            if exc is None:
                print('Running %r' % self, file=sys.stderr)
            else:
                print('Running %r with exception: %r' % (self, exc),
                      file=sys.stderr)
        prev, _local.ident = ident(), self
        try:
            if exc is None:
                self.lastop = self.coro.send(None)
            else:
                self.lastop = self.coro.throw(exc)
        except StopIteration as e:
            self.state = self.STATE_COMPLETED
            self.result = e.value
            return Ready(e.value)
        except (KeyboardInterrupt, GeneratorExit, SystemExit):
            raise
        except Exception as e:
            self.state = self.STATE_FAILED
            self.exception = e
            if self.debug:
                self.handle_error()
            return Ready(exception=e)
        finally:
            _local.ident = prev
        return None

    def close(self):
        """Throw GeneratorExit in the coroutine at the point it's suspended
        (its ``finally`` clauses run). Closing a finished coroutine does
        nothing."""
        if self.state == self.STATE_RUNNING:
            self.state = self.STATE_FAILED
            self.exception = GeneratorExit()
            self.coro.close()

    def handle_error(self):
        print('-' * 40, file=sys.stderr)
        print('Exception happened during processing of coroutine.',
              file=sys.stderr)
        traceback.print_exception(
            type(self.exception), self.exception, self.exception.__traceback__)
        print("Coroutine %s failed." % self, file=sys.stderr)
        print('-' * 40, file=sys.stderr)

    def __repr__(self):
        return "<%s %s instance at 0x%08X wrapping %r, state: %s>" % (
            self.name,
            self.__class__.__name__,
            id(self),
            self.coro,
            self._state_names[self.state]
        )
    __str__ = __repr__
