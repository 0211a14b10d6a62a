"""NASA Data Explorer: proxy API and pages for NASA's public datasets."""

__version__ = "1.0.0"
