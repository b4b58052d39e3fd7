"""ABI of the deployed PortfolioRegistry contract."""

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

PORTFOLIO_REGISTRY_ABI: list[dict] = [
    {
        "type": "function",
        "name": "set",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "assetId", "type": "bytes32"},
            {"name": "amount", "type": "uint128"},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "setMany",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "assetIds", "type": "bytes32[]"},
            {"name": "amounts", "type": "uint128[]"},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "getMany",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "assetIds", "type": "bytes32[]"},
        ],
        "outputs": [{"name": "amounts", "type": "uint128[]"}],
    },
    {
        "type": "event",
        "name": "AssetUpdated",
        "anonymous": False,
        "inputs": [
            {"name": "owner", "type": "address", "indexed": True},
            {"name": "assetId", "type": "bytes32", "indexed": True},
            {"name": "amount", "type": "uint128", "indexed": False},
        ],
    },
    {
        "type": "event",
        "name": "BatchUpdated",
        "anonymous": False,
        "inputs": [
            {"name": "owner", "type": "address", "indexed": True},
            {"name": "count", "type": "uint256", "indexed": False},
        ],
    },
]
