# emoji_index/__init__.py
"""
Emoji metadata index: loads emoji data from pluggable sources, caches it on
disk, and serves lookups, category sections and ranked search.
"""

__version__ = "1.0.0"
