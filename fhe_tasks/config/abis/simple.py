"""
Simple.sol `Test` contract ABI: stores one encrypted uint8 and one encrypted
sum, both publicly decryptable once written.
"""

SIMPLE_TEST_ABI = [
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
    {"inputs": [], "name": "encryptedSimpleValue", "outputs": [{"internalType": "euint8", "name": "", "type": "bytes32"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "encryptedSum", "outputs": [{"internalType": "euint8", "name": "", "type": "bytes32"}], "stateMutability": "view", "type": "function"},
    {"inputs": [{"internalType": "externalEuint8", "name": "inputEuint8", "type": "bytes32"}, {"internalType": "bytes", "name": "inputProof", "type": "bytes"}], "name": "storeEncryptedSimpleValue", "outputs": [], "stateMutability": "nonpayable", "type": "function"},
    {
        "inputs": [
            {"internalType": "externalEuint8", "name": "inputA", "type": "bytes32"},
            {"internalType": "externalEuint8", "name": "inputB", "type": "bytes32"},
            {"internalType": "bytes", "name": "inputProof", "type": "bytes"},
        ],
        "name": "storeEncryptedSum",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]
