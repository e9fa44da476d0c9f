"""goldcast: predictive gold-price pipeline."""

__version__ = "0.1.0"
