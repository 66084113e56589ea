"""
Scheduling framework.

The scheduler is the simplest thing that can drive coroutines with the poll
protocol: a run queue of tasks. Running a task polls its coroutine once with
a context whose waker puts the task back in the queue. Most of the logic is
in the operations the coroutines wait on and in the streams they consume.
See: :mod:`costream.core.events` and :mod:`costream.core.stream`.

`costream` is multi-state. All the state related to running tasks is in the
scheduler, so you could run several schedulers in the same process (one per
thread).
"""
__all__ = ['Scheduler', 'Task', 'block_on']
import collections
import threading

from costream.core.coroutines import CoroutineFuture
from costream.core.poll import Context, Pending
from costream.core.util import priority


class Task(object):
    """A coroutine added in a scheduler. Wakes up in the scheduler's run
    queue."""
    __slots__ = ('sched', 'future', 'cx', 'prio', 'scheduled', 'outcome',
                 'report')

    def __init__(self, sched, coro, prio, report=True):
        self.sched = sched
        self.future = coro if isinstance(coro, CoroutineFuture) \
            else CoroutineFuture(coro)
        self.cx = Context(self.wake)
        self.prio = prio
        self.scheduled = False
        self.outcome = None
        self.report = report

    done = property(lambda self: self.outcome is not None)

    def wake(self):
        self.sched.schedule(self)

    def step(self):
        if self.done:
            return
        res = self.future.poll(self.cx)
        if res is Pending:
            return
        self.outcome = res
        self.sched.task_done(self)
        if res.exception is not None and self.report:
            self.future.handle_error()

    def result(self):
        """Return what the coroutine returned or raise what it raised."""
        if self.outcome is None:
            raise RuntimeError("%r hasn't finished." % self)
        return self.outcome.result()

    def __repr__(self):
        return "<%s at 0x%X %r%s>" % (
            self.__class__.__name__,
            id(self),
            self.future,
            " scheduled" if self.scheduled else ""
        )


class Scheduler(object):
    """Basic deque-based scheduler with primitive prioritisation parameters.

    Usage:

    .. sourcecode:: python

        mysched = Scheduler(default_priority=priority.LAST)

    * default_priority: a default priority option for tasks that do not
      set it. check :class:`costream.core.util.priority`.

    Tasks are woken from any thread. When nothing is in the run queue but
    there are tasks waiting, `run` blocks till one is woken up.
    """
    def __init__(self, default_priority=priority.LAST):
        self.active = collections.deque()
        self.pending = 0
        self.default_priority = default_priority
        self.running = False
        self.wakeup = threading.Condition()

    def __repr__(self):
        return "<%s@0x%X active:%s pending:%s default_priority:%s>" % (
            self.__class__.__name__,
            id(self),
            len(self.active),
            self.pending,
            self.default_priority
        )

    def add(self, coro, args=(), kwargs={}, prio=priority.DEFAULT,
            report=True):
        """Add a coroutine in the scheduler. `coro` can be a coroutine
        function (called with the arguments _args_, _kwargs_), a coroutine,
        a generator or an awaitable.

        The coroutine's failure is printed on stderr unless `report` is
        false. Returns a `Task`."""
        if callable(coro) and not hasattr(coro, 'send'):
            coro = coro(*args, **kwargs)
        if prio == priority.DEFAULT:
            prio = self.default_priority
        task = Task(self, coro, prio, report)
        with self.wakeup:
            self.pending += 1
        self.schedule(task)
        return task

    def schedule(self, task):
        "Put the task in the run queue, if it isn't already there."
        with self.wakeup:
            if task.scheduled or task.done:
                return
            task.scheduled = True
            if task.prio == priority.FIRST:
                self.active.appendleft(task)
            else:
                self.active.append(task)
            self.wakeup.notify()

    def task_done(self, task):
        with self.wakeup:
            self.pending -= 1
            self.wakeup.notify()

    def iter_run(self):
        """
        The actual processing for the main loop is here.

        Running the main loop as a generator (where a iteration is a task
        run) is usefull for interleaving the main loop with other
        applications that have a blocking main loop and require costream to
        run in the same thread.
        """
        self.running = True
        while self.running:
            with self.wakeup:
                while not self.active and self.pending and self.running:
                    self.wakeup.wait()
                if not self.active:
                    break
                task = self.active.popleft()
                task.scheduled = False
            task.step()
            yield

    def run(self):
        """This is the main loop.
        This loop will exit when there are no more tasks to run or stop has
        been called.
        """
        for _ in self.iter_run():
            pass

    def stop(self):
        with self.wakeup:
            self.running = False
            self.wakeup.notify()


def block_on(coro, *args, **kwargs):
    """Run the coroutine (or the coroutine function called with the
    arguments) in a new scheduler, in this thread, and return its result or
    raise its failure."""
    sched = Scheduler()
    task = sched.add(coro, args, kwargs, report=False)
    sched.run()
    return task.result()
