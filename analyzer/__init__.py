"""
Duplicate detection for the news relay.

Compares freshly scraped titles with recently published ones using OpenAI
embeddings and cosine similarity.
"""

__version__ = "0.1.0"
