"""fask: find annotation markers in a codebase and in its recent history."""

__version__ = "0.1.0"
