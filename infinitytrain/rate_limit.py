"""
infinitytrain/rate_limit.py
Shared slowapi limiter for the unauthenticated identity endpoints
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
