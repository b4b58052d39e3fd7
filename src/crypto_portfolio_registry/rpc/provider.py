"""Network connection, contract handles and signing accounts via Ape."""

import logging
from typing import Any

from ape import Contract, accounts, networks

logger = logging.getLogger(__name__)


class ApeRPCProvider:
    """
    Connection to one network through Ape's network management.

    Ape picks the RPC provider from its configuration and installed plugins
    (e.g. Infura when ``WEB3_INFURA_PROJECT_ID`` is set).

    Parameters
    ----------
    chain : str
        Ecosystem name (e.g., 'base', 'ethereum')
    network : str
        Network name (default: 'mainnet')

    """

    def __init__(self, chain: str, network: str = "mainnet") -> None:
        self.chain = chain
        self.network = network
        self._network_context = None
        self._provider = None

    @property
    def is_connected(self) -> bool:
        """Whether connect() succeeded and disconnect() was not called since."""
        return self._provider is not None

    def connect(self) -> None:
        """
        Connect to the network.

        Raises
        ------
        RuntimeError
            If Ape cannot connect
        """
        network_choice = f"{self.chain}:{self.network}"
        try:
            self._network_context = networks.parse_network_choice(network_choice)
            self._network_context.__enter__()
            self._provider = networks.provider
        except Exception as e:
            error_msg = f"Failed to connect to {network_choice}: {e}"
            raise RuntimeError(error_msg) from e
        logger.debug("Connected to %s", network_choice)

    def disconnect(self) -> None:
        """Disconnect from the network."""
        if self._network_context:
            try:
                self._network_context.__exit__(None, None, None)
            except Exception as e:
                logger.debug("Error during network context cleanup: %s", e)
            self._network_context = None
        self._provider = None

    def _require_connection(self) -> None:
        if not self._provider:
            error_msg = "Provider not connected. Call connect() first."
            raise RuntimeError(error_msg)

    def get_contract(self, address: str, abi: list[dict]) -> Any:
        """
        Get a contract instance.

        Parameters
        ----------
        address : str
            Contract address
        abi : list[dict]
            Contract ABI

        Returns
        -------
        ContractInstance
            Ape contract instance

        """
        self._require_connection()
        return Contract(address, abi=abi)

    def load_account(self, alias: str) -> Any:
        """
        Load a local signing account by alias.

        Parameters
        ----------
        alias : str
            Account alias as created with ``ape accounts import``

        Returns
        -------
        AccountAPI
            Ape account able to sign transactions

        """
        return accounts.load(alias)

    def __enter__(self) -> "ApeRPCProvider":
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        """Context manager exit."""
        self.disconnect()
