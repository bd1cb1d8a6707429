"""All constants for the project"""


class NetworkConstants:
    """Default endpoints (Sepolia settlement chain, Celestia Mocha testnet)"""

    ETHEREUM_RPC = "https://ethereum-sepolia-rpc.publicnode.com"
    CELESTIA_RPC = "http://mocha-4-consensus.mesa.newmetric.xyz:26657"
    CONNECT_TIMEOUT = 5.0
    USER_AGENT = "da-challenge-toolkit/0.x"


class ContractConstants:
    """Settlement-chain contract addresses and ABI resource names"""

    BLOBSTREAMX = "0xf0c6429ebab2e7dc6e05dafb61128be21f13cb1e"
    CHALLENGE = "0x7db78664c44e43575fb6f96621c9bcd3b7015c0f"
    CANONICAL_STATE_CHAIN = "0x4e01c14a054f50abfa37a1207b1aed3ab5aeccfc"

    ABI_NAMES = {
        "blobstreamx": "blobstreamx",
        "challenge": "challenge",
        "canonical_state_chain": "canonical_state_chain",
    }


class ScanConstants:
    """Challenge window scanning parameters"""

    BLOCK_TIME_MS = 12000  # Expected time between L1 blocks
    # Max blocks per eth_getLogs call accepted by public RPC providers
    MAX_BLOCK_RANGE = 10000
    RPC_TIMEOUT = 30.0


class CelestiaConstants:
    """Celestia share and namespace layout"""

    NAMESPACE_VERSION_SIZE = 1
    NAMESPACE_ID_SIZE = 28
    NAMESPACE_SIZE = NAMESPACE_VERSION_SIZE + NAMESPACE_ID_SIZE
    HASH_SIZE = 32
    # minNamespace || maxNamespace || sha256 digest
    NMT_NODE_SIZE = 2 * NAMESPACE_SIZE + HASH_SIZE
    PARITY_NAMESPACE = b"\xff" * NAMESPACE_SIZE
