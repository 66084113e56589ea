'''
The core of costream: polling vocabulary, coroutine driving, the stream
adapter and a small executor.

A producer is a coroutine that gets a sender as its first argument:

Example::

    @stream
    async def numbers(y, count):
        for i in range(count):
            await y.send(i)

* ``y.send(item)`` puts the item in the stream's slot and returns a
  `SenderFuture`, an operation that is pending exactly once. Awaiting it
  hands control back to whoever polls the stream, and the stream reports
  the item.

* anything else the producer awaits (a `Signal`, an asyncio future, another
  stream) also surfaces as "pending", but leaves the slot empty, so the
  stream reports "not yet" and the poller waits for the wake-up.

The modules:

  - :mod:`poll` - `Pending`, `Ready`, the end `sentinel` and the `Context`
    that parks wakers on whatever a coroutine yielded
  - :mod:`events` - operations (awaitables that talk to the context) and the
    exceptions
  - :mod:`coroutines` - `CoroutineFuture`, the thing that steps a coroutine
  - :mod:`stream` - the slot, the sender and `AsyncStream`
  - :mod:`compat` - the legacy, context free poll protocol
  - :mod:`schedulers` - a deque based executor and `block_on`
'''
