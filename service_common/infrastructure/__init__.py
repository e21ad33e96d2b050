"""Infrastructure Package

Adapters over third-party clients: the structured common logger, the Sentry
error-tracking sink and the Redis cache facade.
"""
