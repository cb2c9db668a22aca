"""Taskhub — users, tasks and places behind bearer-token auth.

Every protected operation authenticates the caller from a signed token
and authorizes it against per-record ownership before touching storage.
"""

__version__ = "0.1.0"
