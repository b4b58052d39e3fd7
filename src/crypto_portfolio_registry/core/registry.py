"""Per-owner asset amount registry mirroring the on-chain PortfolioRegistry contract."""

from collections.abc import Sequence
from typing import Any, Protocol

from eth_utils import to_checksum_address

from crypto_portfolio_registry.core.identifiers import ASSET_ID_SIZE
from crypto_portfolio_registry.core.models import AssetUpdated, BatchUpdated
from crypto_portfolio_registry.core.units import UINT128_MAX
from crypto_portfolio_registry.exceptions import LengthMismatchError


class AssetStore(Protocol):
    """
    Interface shared by the in-process registry and the deployed contract client.

    Methods
    -------
    get_many(owner, asset_ids)
        Read stored amounts aligned with asset_ids
    set_many(asset_ids, amounts, sender)
        Write all amounts in one atomic batch

    """

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
            One scaled amount per asset id, zero when never written

        """
        ...

    def set_many(self, asset_ids: Sequence[bytes], amounts: Sequence[int], *, sender: Any) -> str | None:
        """
        Overwrite the sender's amounts for asset_ids.

        Parameters
        ----------
        asset_ids : Sequence[bytes]
            32-byte asset ids
        amounts : Sequence[int]
            Scaled amounts, same length and order as asset_ids
        sender : Any
            Address string or account object with an ``address`` attribute

        Returns
        -------
        str | None
            Transaction hash when the store produces one

        """
        ...


def sender_address(sender: Any) -> str:
    """Resolve an address string or account object to a checksummed address."""
    address = getattr(sender, "address", sender)
    return to_checksum_address(str(address))


def _check_asset_id(asset_id: bytes) -> bytes:
    asset_id = bytes(asset_id)
    if len(asset_id) != ASSET_ID_SIZE:
        msg = f"Asset id must be {ASSET_ID_SIZE} bytes, got {len(asset_id)}"
        raise ValueError(msg)
    return asset_id


def _check_amount(amount: int) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        msg = f"Amount must be an int, got {type(amount).__name__}"
        raise ValueError(msg)
    if not 0 <= amount <= UINT128_MAX:
        msg = f"Amount {amount} outside uint128 range"
        raise ValueError(msg)
    return amount


class AssetRegistry:
    """
    In-process registry of (owner, asset id) -> scaled amount.

    Each caller can only write its own entries; anyone can read anyone's.
    Unknown keys read as zero and entries are never deleted.

    """

    def __init__(self) -> None:
        self._amounts: dict[tuple[str, bytes], int] = {}
        self._events: list[AssetUpdated | BatchUpdated] = []

    @property
    def events(self) -> tuple[AssetUpdated | BatchUpdated, ...]:
        """Emitted events, oldest first."""
        return tuple(self._events)

    def set(self, asset_id: bytes, amount: int, *, sender: Any) -> None:
        """
        Overwrite the sender's amount for one asset id.

        Parameters
        ----------
        asset_id : bytes
            32-byte asset id
        amount : int
            Scaled amount (uint128)
        sender : Any
            Caller address or account

        """
        owner = sender_address(sender)
        key = (owner, _check_asset_id(asset_id))
        self._amounts[key] = _check_amount(amount)
        self._events.append(AssetUpdated(owner=owner, asset_id=key[1], amount=amount))

    def set_many(self, asset_ids: Sequence[bytes], amounts: Sequence[int], *, sender: Any) -> None:
        """
        Overwrite several amounts atomically.

        Every element is validated before the first write, so a rejected call
        leaves stored amounts and the event log untouched.

        Parameters
        ----------
        asset_ids : Sequence[bytes]
            32-byte asset ids
        amounts : Sequence[int]
            Scaled amounts aligned with asset_ids
        sender : Any
            Caller address or account

        Raises
        ------
        LengthMismatchError
            If the sequences differ in length
        ValueError
            If an asset id or amount is outside its ABI type

        """
        if len(asset_ids) != len(amounts):
            raise LengthMismatchError(len(asset_ids), len(amounts))

        owner = sender_address(sender)
        writes = [(_check_asset_id(asset_id), _check_amount(amount)) for asset_id, amount in zip(asset_ids, amounts)]

        for asset_id, amount in writes:
            self._amounts[owner, asset_id] = amount
            self._events.append(AssetUpdated(owner=owner, asset_id=asset_id, amount=amount))
        self._events.append(BatchUpdated(owner=owner, count=len(writes)))

    def get_many(self, owner: str, asset_ids: Sequence[bytes]) -> list[int]:
        """
        Read stored amounts for an owner.

        Parameters
        ----------
        owner : str
            Owner address (need not be the caller)
        asset_ids : Sequence[bytes]
            32-byte asset ids

        Returns
        -------
        list[int]
            Amounts in request order, zero for never-written keys

        """
        owner = to_checksum_address(owner)
        return [self._amounts.get((owner, _check_asset_id(asset_id)), 0) for asset_id in asset_ids]
