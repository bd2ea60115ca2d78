"""
Wallet signing for Aori requests.

Two primitives: personal-message signatures (wallet ownership proof and
order cancellation) and raw digest signatures (orders, over their EIP-712
hash). Pure CPU work, no network I/O.
"""

from typing import Optional, Union

from eth_account import Account
from eth_account.messages import encode_defunct

from ..exceptions import SigningError
from ..models.order import Order


def _to_hex(signature: bytes) -> str:
    return "0x" + bytes(signature).hex()


class SigningContext:
    """
    Wallet keypair bound to a chain.

    Signatures are returned as 0x-prefixed hex of the 65-byte r || s || v
    form, v being 27 or 28.
    """

    def __init__(self, private_key: Optional[str], chain_id: int):
        """
        Initialize signing context.

        Args:
            private_key: Hex private key, or None for a context that cannot sign
            chain_id: Chain the order signatures are bound to

        Raises:
            SigningError: if the private key is malformed
        """
        self.chain_id = chain_id
        self._account = None

        if private_key:
            try:
                self._account = Account.from_key(private_key)
            except (ValueError, TypeError) as e:
                raise SigningError(f"Invalid private key: {e}") from None

    @property
    def can_sign(self) -> bool:
        return self._account is not None

    @property
    def address(self) -> Optional[str]:
        """Checksummed address derived from the key."""
        return self._account.address if self._account else None

    def _require_account(self):
        if self._account is None:
            raise SigningError("No private key configured")
        return self._account

    def sign_message(self, message: Union[bytes, str]) -> str:
        """
        Sign with EIP-191 personal-message semantics.

        Args:
            message: Raw bytes, or text encoded as UTF-8

        Raises:
            SigningError: if no private key is configured
        """
        account = self._require_account()
        if isinstance(message, str):
            signable = encode_defunct(text=message)
        else:
            signable = encode_defunct(primitive=bytes(message))
        signed = account.sign_message(signable)
        return _to_hex(signed.signature)

    def sign_hash(self, digest: Union[bytes, str]) -> str:
        """
        Sign a precomputed 32-byte digest directly.

        Args:
            digest: 32 raw bytes, or their hex encoding

        Raises:
            SigningError: on missing key or a digest that is not 32 bytes
        """
        account = self._require_account()
        if isinstance(digest, str):
            text = digest[2:] if digest.lower().startswith("0x") else digest
            try:
                digest = bytes.fromhex(text)
            except ValueError:
                raise SigningError("Digest is not valid hex") from None
        if len(digest) != 32:
            raise SigningError(f"Digest must be 32 bytes, got {len(digest)}")

        signed = Account.unsafe_sign_hash(bytes(digest), private_key=account.key)
        return _to_hex(signed.signature)

    def sign_order(self, order: Order, chain_id: Optional[int] = None) -> str:
        """Sign an order's EIP-712 hash under the Seaport domain."""
        self._require_account()
        return self.sign_hash(order.signing_hash(chain_id if chain_id is not None else self.chain_id))
