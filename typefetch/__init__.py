"""typefetch — serve npm type-declaration files over HTTP."""

__version__ = "0.1.0"
