"""
wfdispatch: dispatch GitHub Actions workflows from a local checkout.
"""

__version__ = "0.1.0"
