"""Overlay cartoon gopher eyes and mouths onto faces found in a photo."""

__version__ = "1.0.0"
