"""
Client-side request memo and paginated entity cache for REST backends.
"""

__version__ = "0.1.0"
