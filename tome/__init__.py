"""Offline wikitext parsing and HTML rendering, a URL navigation guard and pmtiles range serving."""

__version__ = "0.1.0"
__all__ = ["escape", "link", "wikiparse", "render", "navguard", "pmtiles"]