"""Outbound notifications (transaction tracking)."""

from euclidbot.notifications.tracking import TrackingReporter

__all__ = ["TrackingReporter"]
