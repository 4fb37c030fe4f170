"""
upifinder: consistency audits of append-only acquisition archives.
"""

__version__ = "0.4.0"
