"""Crawl agent package.

Public API::

    from scout.agent import run_crawl
    report = run_crawl()
"""

from scout.agent.runner import RunReport, run_crawl

__all__ = ["RunReport", "run_crawl"]
