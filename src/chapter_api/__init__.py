"""
Chapter performance API.

FastAPI service that tracks syllabus chapters and serves filtered,
paginated and aggregated views of them through a Redis read cache.
"""

from .__version__ import __version__

__all__ = ["__version__"]
