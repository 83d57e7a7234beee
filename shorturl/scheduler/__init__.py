"""Scheduler module for the short URL service.

This module provides scheduled task functionality using APScheduler.
"""

from shorturl.scheduler.scheduler import SchedulerService, cleanup_expired_urls_job

__all__ = ["SchedulerService", "cleanup_expired_urls_job"]
