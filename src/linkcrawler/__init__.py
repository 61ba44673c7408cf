"""
Recursive web page crawler that saves every fetched page to a local folder.
Follows a bounded number of anchor links per page down to a given depth.
"""
from linkcrawler.core import ConfigurationError, CrawlConfig, Crawler, crawl, derive_filename
from linkcrawler.links import extract_links

__version__ = "1.0.0"
__all__ = [
    "ConfigurationError",
    "CrawlConfig",
    "Crawler",
    "crawl",
    "derive_filename",
    "extract_links",
]
