# -*- coding: utf-8 -*-
'''
This is a library for turning coroutines that *push* values into streams
that are *pulled*, one poll at a time.

A producer is an ordinary coroutine that loops and hands values to a sender.
The stream wrapping it is polled by the consumer: every poll steps the
producer once and reports an item, "not yet", the end or the producer's
failure.

::

    Roughly the costream internals works like this:

    +--------------------------+
    | async def producer(y):   |
    |     ...                  |          stream.poll_next(cx)
    |  +->await y.send(item)---|---+       |
    |  |  ...                  |   |       +-> cx: step the producer once
    +--|-----------------------+   |                   |
       |                        item goes in      the step ends:
       |                        the slot,         +----+------------+
       |                        the producer      |    |            |
       |                        is pending     returned raised   pending
       |                                          |    |            |
       |                                        end  error    slot has an item?
       |                                                       +----+----+
       |                                                      yes       no
       |                                                       |         |
      next poll resumes the producer  <-------------  Ready(item)   Pending,
                                                                   the waker is
                                                                   parked on what
                                                                   the producer
                                                                   awaits

The stream speaks two protocols:
  - the current one: ``poll_next(cx)`` with a wake-up context
  - the legacy one: a context free ``poll()``, see :mod:`costream.core.compat`

And it can be consumed with ``await stream.next()`` in a costream
:class:`~costream.core.schedulers.Scheduler` or ``async for`` in both the
scheduler and asyncio.
'''

__license__ = u'''
Copyright (c) the costream authors

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in
all copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN
THE SOFTWARE.
'''

__version__ = '0.1.0'

from costream import core
from costream import common
