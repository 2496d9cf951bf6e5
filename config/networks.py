# chain ids
ARBITRUM = 42161
AVALANCHE = 43114
TELOS_MAINNET = 40
TELOS_TESTNET = 41
LOCAL = 31337

DEFAULT_NETWORK = "telos_testnet"

# well known key of the first local node account (anvil / hardhat node)
LOCAL_TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"


NETWORKS = {
    "telos_testnet": {
        "chain_id": TELOS_TESTNET,
        "rpc_url": "https://testnet.telos.net/evm",
        "confirmation_timeout": 120,
    },
    "telos_mainnet": {
        "chain_id": TELOS_MAINNET,
        "rpc_url": "https://mainnet.telos.net/evm",
        "confirmation_timeout": 120,
    },
    "arbitrum": {
        "chain_id": ARBITRUM,
        "rpc_url": "https://arb1.arbitrum.io/rpc",
        "confirmation_timeout": 120,
    },
    "avax": {
        "chain_id": AVALANCHE,
        "rpc_url": "https://api.avax.network/ext/bc/C/rpc",
        "confirmation_timeout": 120,
    },
    "local": {
        "chain_id": LOCAL,
        "rpc_url": "http://127.0.0.1:8545",
        "confirmation_timeout": 120,
    },
}


# per network overrides applied to every transaction
TX_DEFAULTS = {
    "telos_testnet": {
        "gas": 10_000_000,
    },
    "telos_mainnet": {
        "gasPrice": 50_000_000_000,
    },
    "arbitrum": {},
    "avax": {},
    "local": {},
}


KNOWN_ADDRESSES = {
    "telos_testnet": {
        # core
        "Vault": "0x263F1898ce022e1372971343aa90ad5F57151F67",
        "Router": "0xa4B7F1Db1804Ab1e1FCC65078bf9083b3D9d2D78",
        "ShortsTracker": "0xE61056163A2e21c4Fc6F94aAcFc4Ed035240d2b0",
        "OrderBook": "0x4106e849502D9eE5a1263D2DEBd61fb741c42550",
        "ReferralStorage": "0x1A88768168e2a2D9756660Bc81e4a7f17e5fEA8C",
        "WETH": "0xaE85Bf723A9e74d6c663dd226996AC1b8d075AA9",
        # access
        "TokenManager": "0x6CB5ACb7c8fF95B9f10F1De41578BEA86fE1D40B",
        "GlpManager": "0x8Ec18753afC1Dc1a349ED760856e62fe224E2fE0",
        "GMX": "0xe55Fef1a65C9EBB609B827c70837367E0AfcE8b3",
    },
    "telos_mainnet": {},
    "arbitrum": {
        # core
        "Vault": "0x489ee077994B6658eAfA855C308275EAd8097C4A",
        "ShortsTracker": "0xf58eEc83Ba28ddd79390B9e90C4d3EbfF1d434da",
        "OrderBook": "0x09f77E8A13De9a35a7231028187e9fD5DB8a2ACB",
        "ReferralStorage": "0xe6fab3f0c7199b0d34d7fbe83394fc0e0d06e99d",
        "PositionRouter": "0x3D6bA331e3D9702C5e8A8d254e5d8a285F223aba",
        "PositionManager": "0x87a4088Bd721F83b6c2E5102e2FA47022Cb1c831",
        # access
        "TokenManager": "0xddDc546e07f1374A07b270b7d863371e575EA96A",
        "GlpManager": "0x321F653eED006AD1C29D174e17d96351BDe22649",
        "GMX": "0xfc5A1A6EB076a2C7aD06eD22C90d7E710E35ad0a",
    },
    "avax": {},
    "local": {},
}
