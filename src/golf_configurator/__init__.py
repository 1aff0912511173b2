"""Golf iron set configurator and bundle consolidation."""

__version__ = "0.1.0"
