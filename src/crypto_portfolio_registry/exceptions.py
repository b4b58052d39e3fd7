"""Exception hierarchy for pricing, registry and transaction failures."""

from enum import StrEnum


class SaveErrorKind(StrEnum):
    """Reason an on-chain save did not go through."""

    NOT_CONNECTED = "not_connected"
    LENGTH_MISMATCH = "length_mismatch"
    SIGNATURE_REJECTED = "signature_rejected"
    SUBMISSION_FAILED = "submission_failed"


class PortfolioRegistryError(Exception):
    """Base exception for the package."""


class LengthMismatchError(PortfolioRegistryError, ValueError):
    """Raised when a batch write gets identifier and amount sequences of different lengths."""

    def __init__(self, ids_count: int, amounts_count: int) -> None:
        self.ids_count = ids_count
        self.amounts_count = amounts_count
        super().__init__(f"Length mismatch: {ids_count} asset ids, {amounts_count} amounts")


class TransactionError(PortfolioRegistryError):
    """Raised when signing or submitting a registry transaction fails."""

    def __init__(self, message: str, kind: SaveErrorKind = SaveErrorKind.SUBMISSION_FAILED) -> None:
        self.kind = kind
        super().__init__(message)


class PricingError(PortfolioRegistryError):
    """Raised when prices cannot be fetched or parsed."""


class UpstreamError(PricingError):
    """Raised when the upstream price aggregator answers with a non-success status."""

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"Upstream error: {status_code}")


class PriceAPIError(PricingError):
    """Raised when the price proxy answers with a non-success status."""

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"Price API error: {status_code}")


class RegistryReadError(PortfolioRegistryError):
    """Raised when stored amounts cannot be read from the registry contract."""
