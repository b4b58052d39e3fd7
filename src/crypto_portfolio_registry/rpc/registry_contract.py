"""Client for the deployed PortfolioRegistry contract."""

import logging
from collections.abc import Sequence
from typing import Any

from ape.exceptions import ApeException, ContractLogicError, SignatureError

from crypto_portfolio_registry.core.registry import sender_address
from crypto_portfolio_registry.data.abi import PORTFOLIO_REGISTRY_ABI
from crypto_portfolio_registry.exceptions import (
    LengthMismatchError,
    RegistryReadError,
    SaveErrorKind,
    TransactionError,
)
from crypto_portfolio_registry.rpc.retry import RetryConfig, with_retry

logger = logging.getLogger(__name__)


class PortfolioRegistryContract:
    """
    Reads and writes per-owner asset amounts on the deployed registry.

    Reads are retried with exponential backoff; writes are sent once.

    Parameters
    ----------
    rpc_provider : Any
        Connected provider exposing ``get_contract(address, abi)``
    address : str
        Registry contract address
    retry_config : RetryConfig | None
        Retry configuration for reads

    """

    def __init__(
        self,
        rpc_provider: Any,
        address: str,
        retry_config: RetryConfig | None = None,
    ) -> None:
        self.rpc_provider = rpc_provider
        self.address = address
        self.retry_config = retry_config or RetryConfig(
            max_retries=3,
            base_delay=1.0,
            max_delay=30.0,
            no_retry=(ContractLogicError, ValueError, TypeError),
        )
        self._contract = None

    @property
    def contract(self) -> Any:
        """Lazily created Ape contract instance."""
        if self._contract is None:
            self._contract = self.rpc_provider.get_contract(self.address, abi=PORTFOLIO_REGISTRY_ABI)
        return self._contract

    def get_many(self, owner: str, asset_ids: Sequence[bytes]) -> list[int]:
        """
        Read the amounts stored by owner.

        Parameters
        ----------
        owner : str
            Owner address
        asset_ids : Sequence[bytes]
            32-byte asset ids

        Returns
        -------
        list[int]
            Scaled amounts aligned with asset_ids

        Raises
        ------
        RegistryReadError
            If the call keeps failing after all retries

        """
        if not asset_ids:
            return []

        read = with_retry(self.retry_config)(self.contract.getMany)
        try:
            amounts = read(owner, list(asset_ids))
        except Exception as e:
            msg = f"getMany failed for {owner}: {e}"
            raise RegistryReadError(msg) from e
        return [int(amount) for amount in amounts]

    def set_many(self, asset_ids: Sequence[bytes], amounts: Sequence[int], *, sender: Any) -> str | None:
        """
        Submit one ``setMany`` transaction.

        Parameters
        ----------
        asset_ids : Sequence[bytes]
            32-byte asset ids
        amounts : Sequence[int]
            Scaled amounts aligned with asset_ids
        sender : Any
            Ape account that signs the transaction

        Returns
        -------
        str | None
            Transaction hash

        Raises
        ------
        LengthMismatchError
            If the sequences differ in length (checked before signing)
        TransactionError
            If signing is rejected or the transaction fails

        """
        if len(asset_ids) != len(amounts):
            raise LengthMismatchError(len(asset_ids), len(amounts))

        logger.info("Submitting setMany with %d entries from %s", len(asset_ids), sender_address(sender))
        receipt = self._transact("setMany", list(asset_ids), list(amounts), sender=sender)
        return getattr(receipt, "txn_hash", None)

    def set(self, asset_id: bytes, amount: int, *, sender: Any) -> str | None:
        """
        Submit one ``set`` transaction.

        Parameters
        ----------
        asset_id : bytes
            32-byte asset id
        amount : int
            Scaled amount
        sender : Any
            Ape account that signs the transaction

        Returns
        -------
        str | None
            Transaction hash

        """
        receipt = self._transact("set", asset_id, amount, sender=sender)
        return getattr(receipt, "txn_hash", None)

    def _transact(self, method: str, *args: Any, sender: Any) -> Any:
        try:
            return getattr(self.contract, method)(*args, sender=sender)
        except SignatureError as e:
            msg = f"Signing {method} was rejected: {e}"
            raise TransactionError(msg, kind=SaveErrorKind.SIGNATURE_REJECTED) from e
        except ApeException as e:
            msg = f"{method} transaction failed: {e}"
            raise TransactionError(msg, kind=SaveErrorKind.SUBMISSION_FAILED) from e
