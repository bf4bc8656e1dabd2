# Scheduler - cron-triggered builds
from .cron import CronJob, CronScheduler, next_fire_time

__all__ = ["CronJob", "CronScheduler", "next_fire_time"]
