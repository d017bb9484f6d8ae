"""Cover and abstract page generation for submitted manuscripts."""

__version__ = "0.1.0"
