"""Questify client core: API client, quiz session flow and response analytics."""

from questify.constants.about import APP_VERSION as __version__

__all__ = ["__version__"]
