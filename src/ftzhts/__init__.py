"""ftz-hts - HTS lookup and duty-rate resolution for Foreign Trade Zone operations."""

__version__ = "1.0.0"

__all__ = ["__version__"]
