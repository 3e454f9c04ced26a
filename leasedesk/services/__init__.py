"""Services for LeaseDesk application."""

from leasedesk.services.media_preview import MediaPreviewService, TTLCache
from leasedesk.services.rate_limit import SlidingWindowRateLimiter

__all__ = ["MediaPreviewService", "SlidingWindowRateLimiter", "TTLCache"]
