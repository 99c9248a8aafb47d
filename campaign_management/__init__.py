"""
Campaign Management

Core of the marketing campaigns service: the Campaign aggregate and its
lifecycle, the metrics engine, and the application layer orchestrating
persistence, event publishing and notifications.
"""

__version__ = "0.1.0"
