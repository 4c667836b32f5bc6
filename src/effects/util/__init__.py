"""Raster primitives shared by the creative effects, plus util.* effects."""
