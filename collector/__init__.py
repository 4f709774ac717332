"""
Orchestration for the news relay.

Runs the per-source harvesting cycle (scrape, deduplicate, rewrite, persist,
reconcile images, deliver) on a fixed polling interval, and owns storage,
logging setup and process configuration.
"""

__version__ = "0.1.0"
