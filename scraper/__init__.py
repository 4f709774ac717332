"""
Source registry and web scraping for the news relay.

This package holds the static source catalog, the article data model and the
site-specific extraction strategies driven through Playwright.
"""

__version__ = "0.1.0"
