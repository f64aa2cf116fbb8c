"""
Server-side services: security helpers, rate limiting, mail, avatar storage,
the moderation workflow and request dependencies.
"""
