"""
py_clans - clan territory simulation core.

Procedural world generation (land mask, terrain, village placement) and
the village construction rules.
"""

__version__ = "0.1.0"
