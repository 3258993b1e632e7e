"""Per-client rate limiting (slowapi, in-memory storage)."""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
