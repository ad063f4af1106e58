"""stackblock - stack the falling block arcade game."""

__version__ = "0.1.0"
