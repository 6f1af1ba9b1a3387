from pydantic import BaseModel


class RateLimitInfo(BaseModel):
    """Snapshot of the most recent upstream x-ratelimit-* headers. reset is epoch seconds."""

    limit: int
    remaining: int
    reset: float
