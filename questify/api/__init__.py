"""HTTP access to the Questify backend."""

from .client import QuestifyApiClient, is_already_answered

__all__ = ["QuestifyApiClient", "is_already_answered"]
