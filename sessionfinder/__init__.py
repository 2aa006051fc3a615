"""
sessionfinder - find tabletop campaign session times from layered availability.
"""

__version__ = "0.1.0"
