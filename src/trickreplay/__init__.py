"""trickreplay — replay reconstruction and navigation for recorded trick-taking matches."""

__version__ = "0.1.0"
