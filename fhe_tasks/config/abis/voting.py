"""
EncryptedVoting contract ABI.

Two options (0 and 1). Votes are encrypted euint8 values; validity and the
final tally stay encrypted until finalize() marks the winner publicly
decryptable.
"""

ENCRYPTED_VOTING_ABI = [
    {
        "inputs": [
            {"internalType": "address", "name": "aclAddress", "type": "address"},
            {"internalType": "address", "name": "fhevmExecutorAddress", "type": "address"},
            {"internalType": "address", "name": "kmsVerifierAddress", "type": "address"},
            {"internalType": "address", "name": "decryptionOracleAddress", "type": "address"},
            {"internalType": "string", "name": "question", "type": "string"},
        ],
        "stateMutability": "nonpayable",
        "type": "constructor",
    },
    {"inputs": [], "name": "question", "outputs": [{"internalType": "string", "name": "", "type": "string"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "voteIsValid", "outputs": [{"internalType": "ebool", "name": "", "type": "bytes32"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "totalVotes", "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}], "stateMutability": "view", "type": "function"},
    {"inputs": [{"internalType": "externalEuint8", "name": "vote", "type": "bytes32"}, {"internalType": "bytes", "name": "inputProof", "type": "bytes"}], "name": "isValidVote", "outputs": [], "stateMutability": "nonpayable", "type": "function"},
    {"inputs": [{"internalType": "externalEuint8", "name": "vote", "type": "bytes32"}, {"internalType": "bytes", "name": "inputProof", "type": "bytes"}], "name": "castVote", "outputs": [], "stateMutability": "nonpayable", "type": "function"},
    {"inputs": [], "name": "finalize", "outputs": [], "stateMutability": "nonpayable", "type": "function"},
    {
        "inputs": [],
        "name": "winning",
        "outputs": [
            {"internalType": "euint8", "name": "option", "type": "bytes32"},
            {"internalType": "euint16", "name": "tally", "type": "bytes32"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
]
