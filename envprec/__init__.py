"""envprec - empirical precedence among environment-variable option mechanisms."""

__version__ = "0.1.0"
