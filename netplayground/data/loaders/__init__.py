"""Dataset loaders register themselves with :mod:`netplayground.data.registry` on import."""

from . import image_standin, toy

__all__ = ["image_standin", "toy"]
