"""
Rewrite stage for the news relay.

Sends each article through a chat model that rewrites the title and body for
Telegram and decides whether the story is on-topic.
"""

__version__ = "0.1.0"
