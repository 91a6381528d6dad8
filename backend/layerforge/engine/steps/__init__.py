"""Render steps. Importing this package registers all of them."""

from layerforge.engine.steps import s01_crop, s02_resize, s03_flip, s04_rotate  # noqa: F401
