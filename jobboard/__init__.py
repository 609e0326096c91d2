"""jobboard: a jobs resource with dynamic, parameterized query construction."""

__version__ = "0.1.0"
