"""Version from VERSION file."""
__version__ = "0.1.0"
