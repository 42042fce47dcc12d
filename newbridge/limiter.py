"""Process-wide rate limiter, keyed by client IP address.

Counters live in memory, so they reset on restart and are not shared
between worker processes.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
