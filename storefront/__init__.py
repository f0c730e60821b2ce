"""FreshCart grocery storefront"""

__version__ = "1.0.0"
