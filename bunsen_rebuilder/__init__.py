"""
BunsenLabs source rebuilder
"""

__version__ = "1.0.0"
