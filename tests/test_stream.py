__doc_all__ = []

import asyncio
import copy
import gc
import pickle
import sys
import types
import unittest
from io import StringIO

from costream.common import *
from costream.core.stream import Slot
from base import WakeCounter, numbers, poll_to_end


class SlotTest(unittest.TestCase):
    def test_put_take(self):
        slot = Slot()
        self.assertEqual(slot.take(), (False, None))
        self.assertFalse(slot.put(None))
        self.assertEqual(slot.take(), (True, None))
        self.assertEqual(slot.take(), (False, None))

    def test_overwrite(self):
        slot = Slot()
        slot.put(1)
        self.assertTrue(slot.put(2))
        self.assertEqual(slot.take(), (True, 2))

    def test_no_replace(self):
        slot = Slot()
        slot.put(1)
        self.assertTrue(slot.put(2, replace=False))
        self.assertEqual(slot.take(), (True, 1))


class StreamTest(unittest.TestCase):
    def setUp(self):
        self.waker = WakeCounter()
        self.cx = Context(self.waker)

    def test_bytes(self):
        results = poll_to_end(numbers(10), self.cx)
        self.assertEqual(results, [Ready(i) for i in range(10)] + [Ready(sentinel)])
        self.assertEqual(len([r for r in results if not r.ended]), 10)
        self.assertEqual(self.waker.count, 0)

    def test_empty(self):
        async def nothing(y):
            pass
        strm = AsyncStream(nothing)
        res = strm.poll_next(self.cx)
        self.assertTrue(res.ended)
        self.assertTrue(strm.finished)

    def test_failure(self):
        async def failing(y):
            raise ValueError("boom")
        res = AsyncStream(failing).poll_next(self.cx)
        self.assertIsInstance(res.exception, ValueError)
        self.assertRaises(ValueError, res.result)

    def test_items_then_failure(self):
        async def failing(y):
            for i in range(3):
                await y.send(i)
            raise ValueError("boom")
        results = poll_to_end(AsyncStream(failing), self.cx)
        self.assertEqual(results[:3], [Ready(0), Ready(1), Ready(2)])
        self.assertEqual(len(results), 4)
        self.assertIsInstance(results[3].exception, ValueError)

    def test_none_items(self):
        async def nones(y):
            await y.send(None)
            await y.send(None)
        results = poll_to_end(AsyncStream(nones), self.cx)
        self.assertEqual(results, [Ready(None), Ready(None), Ready(sentinel)])

    def test_unrelated_pending(self):
        sig = events.Signal()
        async def producer(y):
            await y.send('a')
            value = await sig.wait()
            await y.send(value)
        strm = AsyncStream(producer)
        self.assertEqual(strm.poll_next(self.cx), Ready('a'))
        self.assertIs(strm.poll_next(self.cx), Pending)
        self.assertEqual(self.waker.count, 0)
        self.assertIs(strm.poll_next(self.cx), Pending)
        self.assertFalse(strm.finished)
        sig.set('b')
        self.assertTrue(self.waker.count)
        self.assertEqual(strm.poll_next(self.cx), Ready('b'))
        self.assertEqual(strm.poll_next(self.cx), Ready(sentinel))

    def test_bare_yield(self):
        async def producer(y):
            await asyncio.sleep(0)
            await y.send(1)
        strm = AsyncStream(producer)
        self.assertIs(strm.poll_next(self.cx), Pending)
        self.assertEqual(self.waker.count, 1)
        self.assertEqual(strm.poll_next(self.cx), Ready(1))
        self.assertEqual(strm.poll_next(self.cx), Ready(sentinel))

    def test_last_item_lost(self):
        async def producer(y):
            y.send('x')
        strm = AsyncStream(producer)
        with self.assertWarns(RuntimeWarning):
            res = strm.poll_next(self.cx)
        self.assertEqual(res, Ready(sentinel))
        self.assertTrue(strm.finished)

    def test_last_item_lost_strict(self):
        async def producer(y):
            y.send('x')
        strm = AsyncStream(producer)
        strm.strict = True
        res = strm.poll_next(self.cx)
        self.assertIsInstance(res.exception, events.ItemLost)
        self.assertEqual(res.exception.item, 'x')

    def test_double_send(self):
        async def producer(y):
            y.send(1)
            await y.send(2)
        strm = AsyncStream(producer)
        with self.assertWarns(RuntimeWarning):
            res = strm.poll_next(self.cx)
        self.assertEqual(res, Ready(2))
        self.assertEqual(strm.poll_next(self.cx), Ready(sentinel))

    def test_double_send_strict(self):
        async def producer(y):
            y.send(1)
            await y.send(2)
        strm = AsyncStream(producer)
        strm.strict = True
        res = strm.poll_next(self.cx)
        self.assertIsInstance(res.exception, events.SlotOverflow)
        self.assertTrue(strm.finished)

    def test_poll_after_end(self):
        strm = numbers(0)
        self.assertTrue(strm.poll_next(self.cx).ended)
        self.assertRaises(events.StreamFinished, strm.poll_next, self.cx)

    def test_poll_after_failure(self):
        async def failing(y):
            raise ValueError("boom")
        strm = AsyncStream(failing)
        strm.poll_next(self.cx)
        self.assertRaises(events.StreamFinished, strm.poll_next, self.cx)

    def test_item_lost_on_failure(self):
        async def producer(y):
            y.send('x')
            raise ValueError("boom")
        strm = AsyncStream(producer)
        with self.assertWarns(RuntimeWarning):
            res = strm.poll_next(self.cx)
        self.assertIsInstance(res.exception, ValueError)
        self.assertTrue(strm.finished)

    def test_return_value(self):
        async def producer(y):
            await y.send(1)
            return 5
        results = poll_to_end(AsyncStream(producer), self.cx)
        self.assertEqual(results[0], Ready(1))
        self.assertIsInstance(results[1].exception, RuntimeError)

    def test_reentrant_poll(self):
        holder = []
        async def producer(y):
            holder[0].poll_next(Context(lambda: None))
        strm = AsyncStream(producer)
        holder.append(strm)
        res = strm.poll_next(self.cx)
        self.assertIsInstance(res.exception, RuntimeError)
        self.assertFalse(strm.polling)

    def test_close(self):
        log = []
        async def producer(y):
            try:
                await y.send(1)
                await y.send(2)
            finally:
                log.append('closed')
        strm = AsyncStream(producer)
        self.assertEqual(strm.poll_next(self.cx), Ready(1))
        strm.close()
        self.assertEqual(log, ['closed'])
        self.assertTrue(strm.finished)
        self.assertRaises(events.StreamFinished, strm.poll_next, self.cx)

    def test_drop(self):
        log = []
        async def producer(y):
            try:
                await y.send(1)
                await y.send(2)
            finally:
                log.append('closed')
        strm = AsyncStream(producer)
        self.assertEqual(strm.poll_next(self.cx), Ready(1))
        del strm
        gc.collect()
        self.assertEqual(log, ['closed'])

    def test_sender_is_not_copyable(self):
        senders = []
        async def producer(y):
            senders.append(y)
        AsyncStream(producer).poll_next(self.cx)
        sender = senders[0]
        self.assertRaises(TypeError, copy.copy, sender)
        self.assertRaises(TypeError, copy.deepcopy, sender)
        self.assertRaises(TypeError, pickle.dumps, sender)

    def test_generator_producer(self):
        def producer(y, count):
            for i in range(count):
                yield from y.send(i)
        results = poll_to_end(AsyncStream(producer, 3), self.cx)
        self.assertEqual(results, [Ready(0), Ready(1), Ready(2), Ready(sentinel)])

    def test_method_producer(self):
        class Counter(object):
            def __init__(self, start):
                self.start = start
            @stream
            async def count(self, y, n):
                for i in range(n):
                    await y.send(self.start + i)
        results = poll_to_end(Counter(5).count(3), self.cx)
        self.assertEqual(results, [Ready(5), Ready(6), Ready(7), Ready(sentinel)])
        self.assertIsInstance(Counter.count, stream)

    def test_bad_producer(self):
        self.assertRaises(ValueError, AsyncStream, lambda y: 42)

    def test_bad_yield(self):
        @types.coroutine
        def weird():
            yield 'not an operation'
        async def producer(y):
            try:
                await weird()
            except events.BadYield:
                await y.send('caught')
        strm = AsyncStream(producer)
        self.assertEqual(strm.poll_next(self.cx), Ready('caught'))
        self.assertEqual(strm.poll_next(self.cx), Ready(sentinel))

    def test_debug(self):
        @debug_stream
        async def failing(y):
            await y.send(1)
            raise ValueError("traced")
        strm = failing()
        self.assertTrue(strm.debug)
        sys.stderr = StringIO()
        try:
            poll_to_end(strm, self.cx)
            out = sys.stderr.getvalue()
        finally:
            sys.stderr = sys.__stderr__
        self.assertIn('Running', out)
        self.assertIn('Yields', out)
        self.assertIn('ValueError: traced', out)


if __name__ == "__main__":
    sys.argv.insert(1, '-v')
    unittest.main()
