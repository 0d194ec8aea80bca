"""
Join sound API: per-member join sounds for Discord guilds.
"""

__version__ = "1.0.0"
