"""playrate - music entity resolution and play-count annualization."""

__version__ = "1.0.0"
