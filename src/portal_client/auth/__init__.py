"""Credential sources and header composers."""
from .base import CredentialSource, HeaderComposer
from .bearer import BearerHeaders
from .callbacks import CallbackCredentialSource
from .token_file import TokenFileCredentialSource

__all__ = [
    "CredentialSource",
    "HeaderComposer",
    "BearerHeaders",
    "CallbackCredentialSource",
    "TokenFileCredentialSource",
]
