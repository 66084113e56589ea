"""
Mischelaneous or common.
"""
__all__ = ['priority']


class priority(object):
    """
    Where a woken task goes in the scheduler's run queue.

    ======== ===================================================================
    Property Description
    ======== ===================================================================
    DEFAULT  Use the default_priority set in the Scheduler
    -------- -------------------------------------------------------------------
    LAST,
    NOPRIO   Allways schedule the task at the end of the queue
    -------- -------------------------------------------------------------------
    FIRST,
    PRIO     Allways schedule the task at the front of the queue
    ======== ===================================================================

    """
    DEFAULT = -1
    LAST = NOPRIO = 0
    FIRST = PRIO = 3
