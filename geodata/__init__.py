"""
Geodata: a hierarchical database of place names.

Tools to import, translate, validate, repair and export a tree of GeoJSON
files, one per administrative level.
"""

__version__ = "0.1.0"
