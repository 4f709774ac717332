"""
Delivery for the news relay.

Publishes finished articles to a Telegram channel as photo posts with a
MarkdownV2 caption.
"""

__version__ = "0.1.0"
