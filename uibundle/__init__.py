"""UI bundle builder — lint, build, preview and pack a site UI bundle."""

__version__ = "0.1.0"
