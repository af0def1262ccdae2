"""
FHECounter contract ABI.

Encrypted handles (euint32 / externalEuint32) are bytes32 on the ABI level.
"""

FHE_COUNTER_ABI = [
    {
        "inputs": [
            {"internalType": "address", "name": "aclAddress", "type": "address"},
            {"internalType": "address", "name": "fhevmExecutorAddress", "type": "address"},
            {"internalType": "address", "name": "kmsVerifierAddress", "type": "address"},
            {"internalType": "address", "name": "decryptionOracleAddress", "type": "address"},
        ],
        "stateMutability": "nonpayable",
        "type": "constructor",
    },
    {"inputs": [], "name": "getCount", "outputs": [{"internalType": "euint32", "name": "", "type": "bytes32"}], "stateMutability": "view", "type": "function"},
    {"inputs": [{"internalType": "externalEuint32", "name": "inputEuint32", "type": "bytes32"}, {"internalType": "bytes", "name": "inputProof", "type": "bytes"}], "name": "increment", "outputs": [], "stateMutability": "nonpayable", "type": "function"},
    {"inputs": [{"internalType": "externalEuint32", "name": "inputEuint32", "type": "bytes32"}, {"internalType": "bytes", "name": "inputProof", "type": "bytes"}], "name": "decrement", "outputs": [], "stateMutability": "nonpayable", "type": "function"},
]
