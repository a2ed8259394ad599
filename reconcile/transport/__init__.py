"""HTTP transport: credential rotation, client construction and request execution."""

from .rotator import CredentialRotator
from .client import build_client
from .requestor import Requestor

__all__ = ["CredentialRotator", "build_client", "Requestor"]
