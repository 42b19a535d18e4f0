"""Side-by-side diff engine with collapsible unchanged regions."""

__version__ = "0.1.0"
