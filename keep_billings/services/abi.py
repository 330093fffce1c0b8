"""Minimal contract ABIs for the read-only calls the billing tool makes"""


def _view(name, inputs, output_type):
    return {
        "type": "function",
        "stateMutability": "view",
        "name": name,
        "inputs": [{"name": arg, "type": arg_type} for arg, arg_type in inputs],
        "outputs": [{"name": "", "type": output_type}],
    }


ERC20_ABI = [
    _view("balanceOf", [("owner", "address")], "uint256"),
]

TOKEN_STAKING_ABI = [
    _view("balanceOf", [("_address", "address")], "uint256"),
    {
        "type": "function",
        "stateMutability": "nonpayable",
        "name": "delegate",
        "inputs": [
            {"name": "_from", "type": "address"},
            {"name": "_value", "type": "uint256"},
            {"name": "_extraData", "type": "bytes"},
        ],
        "outputs": [],
    },
]

KEEP_RANDOM_BEACON_OPERATOR_ABI = [
    _view("getNumberOfCreatedGroups", [], "uint256"),
    _view("getFirstActiveGroupIndex", [], "uint256"),
    _view("getGroupPublicKey", [("groupIndex", "uint256")], "bytes"),
    _view("getGroupMembers", [("groupPubKey", "bytes")], "address[]"),
    _view("getGroupMemberRewards", [("groupPubKey", "bytes")], "uint256"),
    _view("hasWithdrawnRewards", [("operator", "address"), ("groupIndex", "uint256")], "bool"),
    {
        "type": "function",
        "stateMutability": "nonpayable",
        "name": "submitDkgResult",
        "inputs": [
            {"name": "submitterMemberIndex", "type": "uint256"},
            {"name": "groupPubKey", "type": "bytes"},
            {"name": "misbehaved", "type": "bytes"},
            {"name": "signatures", "type": "bytes"},
            {"name": "signingMembersIndexes", "type": "uint256[]"},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "stateMutability": "nonpayable",
        "name": "relayEntry",
        "inputs": [{"name": "_groupSignature", "type": "bytes"}],
        "outputs": [],
    },
    {
        "type": "function",
        "stateMutability": "nonpayable",
        "name": "withdrawGroupMemberRewards",
        "inputs": [
            {"name": "operator", "type": "address"},
            {"name": "groupIndex", "type": "uint256"},
        ],
        "outputs": [],
    },
]

BONDED_ECDSA_KEEP_FACTORY_ABI = [
    _view("getKeepCount", [], "uint256"),
    _view("getKeepAtIndex", [("index", "uint256")], "address"),
]

BONDED_ECDSA_KEEP_ABI = [
    _view("isActive", [], "bool"),
    _view("getMembers", [], "address[]"),
    _view("getMemberETHBalance", [("_member", "address")], "uint256"),
    {
        "type": "function",
        "stateMutability": "nonpayable",
        "name": "submitPublicKey",
        "inputs": [{"name": "_publicKey", "type": "bytes"}],
        "outputs": [],
    },
    {
        "type": "function",
        "stateMutability": "nonpayable",
        "name": "submitSignature",
        "inputs": [
            {"name": "_r", "type": "bytes32"},
            {"name": "_s", "type": "bytes32"},
            {"name": "_recoveryID", "type": "uint8"},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "stateMutability": "nonpayable",
        "name": "withdraw",
        "inputs": [{"name": "_member", "type": "address"}],
        "outputs": [],
    },
]

# ABIs used to name the method of an outbound operator transaction
METHOD_LOOKUP_ABIS = [
    TOKEN_STAKING_ABI,
    KEEP_RANDOM_BEACON_OPERATOR_ABI,
    BONDED_ECDSA_KEEP_ABI,
]
