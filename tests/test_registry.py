"""Tests for the in-process asset registry."""

import pytest
from eth_utils import to_checksum_address

from crypto_portfolio_registry.core.identifiers import derive_asset_id
from crypto_portfolio_registry.core.models import AssetUpdated, BatchUpdated
from crypto_portfolio_registry.core.registry import UINT128_MAX, AssetRegistry
from crypto_portfolio_registry.exceptions import LengthMismatchError

OWNER = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"
OTHER_OWNER = "0x1111111111111111111111111111111111111111"

BTC = derive_asset_id("coingecko:bitcoin")
ETH = derive_asset_id("coingecko:ethereum")
SOL = derive_asset_id("coingecko:solana")


def test_batch_write_then_read_returns_written_amounts(registry):
    """A batch read returns exactly what the batch write stored, in order."""
    registry.set_many([BTC, ETH, SOL], [5, 0, 7 * 10**18], sender=OWNER)

    assert registry.get_many(OWNER, [BTC, ETH, SOL]) == [5, 0, 7 * 10**18]
    assert registry.get_many(OWNER, [SOL, BTC]) == [7 * 10**18, 5]


def test_unknown_keys_read_as_zero(registry):
    """Never-written (owner, asset) pairs read as zero."""
    registry.set(BTC, 42, sender=OWNER)

    assert registry.get_many(OWNER, [ETH]) == [0]
    assert registry.get_many(OTHER_OWNER, [BTC]) == [0]
    assert registry.get_many(OWNER, []) == []


def test_length_mismatch_is_rejected_atomically(registry):
    """A mismatched batch changes nothing and emits nothing."""
    registry.set_many([BTC, ETH], [1, 2], sender=OWNER)
    events_before = registry.events

    with pytest.raises(LengthMismatchError) as exc_info:
        registry.set_many([BTC, ETH], [9], sender=OWNER)

    assert exc_info.value.ids_count == 2
    assert exc_info.value.amounts_count == 1
    assert registry.get_many(OWNER, [BTC, ETH]) == [1, 2]
    assert registry.events == events_before


def test_invalid_element_rejects_whole_batch(registry):
    """An out-of-range amount late in the batch leaves earlier entries untouched."""
    registry.set(BTC, 1, sender=OWNER)

    with pytest.raises(ValueError):
        registry.set_many([BTC, ETH], [100, UINT128_MAX + 1], sender=OWNER)

    assert registry.get_many(OWNER, [BTC, ETH]) == [1, 0]


def test_last_write_wins(registry):
    """Later writes overwrite earlier ones per key."""
    registry.set(BTC, 1, sender=OWNER)
    registry.set_many([BTC, BTC], [2, 3], sender=OWNER)

    assert registry.get_many(OWNER, [BTC]) == [3]


def test_writes_are_scoped_to_sender(registry):
    """Each sender only writes its own entries; reads work for any owner."""
    registry.set(BTC, 10, sender=OWNER)
    registry.set(BTC, 20, sender=OTHER_OWNER)

    assert registry.get_many(OWNER, [BTC]) == [10]
    assert registry.get_many(OTHER_OWNER, [BTC]) == [20]


def test_owner_address_case_insensitive(registry):
    """Owner addresses are normalised before use as keys."""
    registry.set(BTC, 10, sender=OWNER.lower())

    assert registry.get_many(OWNER, [BTC]) == [10]


def test_sender_can_be_account_object(registry):
    """Objects exposing an address attribute are accepted as sender."""

    class Account:
        address = OWNER

    registry.set_many([ETH], [3], sender=Account())

    assert registry.get_many(OWNER, [ETH]) == [3]


def test_events_emitted_per_element_and_batch(registry):
    """Batch writes emit one AssetUpdated per element then one BatchUpdated."""
    registry.set_many([BTC, ETH], [1, 2], sender=OWNER)

    owner = to_checksum_address(OWNER)
    assert registry.events == (
        AssetUpdated(owner=owner, asset_id=BTC, amount=1),
        AssetUpdated(owner=owner, asset_id=ETH, amount=2),
        BatchUpdated(owner=owner, count=2),
    )


def test_single_set_emits_asset_updated(registry):
    """set emits a single AssetUpdated and accepts zero."""
    registry.set(SOL, 0, sender=OWNER)

    assert registry.events == (AssetUpdated(owner=to_checksum_address(OWNER), asset_id=SOL, amount=0),)


@pytest.mark.parametrize("asset_id", [b"", b"\x01" * 31, b"\x01" * 33])
def test_asset_id_must_be_32_bytes(registry, asset_id):
    """Asset ids of the wrong width are rejected."""
    with pytest.raises(ValueError):
        registry.set(asset_id, 1, sender=OWNER)


@pytest.mark.parametrize("amount", [-1, UINT128_MAX + 1, 1.5, True])
def test_amount_must_fit_uint128(registry, amount):
    """Amounts outside uint128 are rejected."""
    with pytest.raises(ValueError):
        registry.set(BTC, amount, sender=OWNER)
    assert registry.events == ()


def test_uint128_max_is_accepted(registry):
    """The largest uint128 value round-trips."""
    registry.set_many([BTC], [UINT128_MAX], sender=OWNER)

    assert registry.get_many(OWNER, [BTC]) == [UINT128_MAX]


def test_invalid_owner_address_rejected():
    """Malformed addresses raise ValueError."""
    with pytest.raises(ValueError):
        AssetRegistry().get_many("not-an-address", [BTC])
