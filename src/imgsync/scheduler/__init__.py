"""
imgsync scheduler - runs reconcile passes at startup and on an interval.
"""

from imgsync.scheduler.driver import SchedulerDriver

__all__ = ["SchedulerDriver"]
