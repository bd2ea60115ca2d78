# Aori clients
from .signer import SigningContext
from .payloads import RequestIdCounter
from .provider import AoriProvider, WalletIdentity

__all__ = ["SigningContext", "RequestIdCounter", "AoriProvider", "WalletIdentity"]
