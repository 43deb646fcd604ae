from __future__ import annotations

from typing import Dict

# Provider request methods
METHOD_CHAIN_ID = "eth_chainId"
METHOD_ACCOUNTS = "eth_accounts"
METHOD_REQUEST_ACCOUNTS = "eth_requestAccounts"
METHOD_SWITCH_CHAIN = "wallet_switchEthereumChain"
METHOD_ADD_CHAIN = "wallet_addEthereumChain"
METHOD_SEND_TRANSACTION = "eth_sendTransaction"
METHOD_GET_RECEIPT = "eth_getTransactionReceipt"

# Provider events
EVENT_CHAIN_CHANGED = "chainChanged"
EVENT_ACCOUNTS_CHANGED = "accountsChanged"

PROVIDER_EVENTS = (EVENT_CHAIN_CHANGED, EVENT_ACCOUNTS_CHANGED)

# EIP-1193 / EIP-3085 error codes
ERROR_CODES: Dict[str, int] = {
    "USER_REJECTED": 4001,
    "UNAUTHORIZED": 4100,
    "UNSUPPORTED_METHOD": 4200,
    "DISCONNECTED": 4900,
    "CHAIN_DISCONNECTED": 4901,
    "UNRECOGNIZED_CHAIN": 4902,
    "INVALID_PARAMS": -32602,
    "INTERNAL_ERROR": -32603,
}

CODE_USER_REJECTED = ERROR_CODES["USER_REJECTED"]
CODE_UNAUTHORIZED = ERROR_CODES["UNAUTHORIZED"]
CODE_UNRECOGNIZED_CHAIN = ERROR_CODES["UNRECOGNIZED_CHAIN"]
CODE_INVALID_PARAMS = ERROR_CODES["INVALID_PARAMS"]

# Faucet contract deployed on Core Testnet 2
FAUCET_ADDRESS = "0x80705Cc3B81A41c4e9AE785004d2F65445782a18"
FAUCET_FUNCTION = "faucet()"

RECEIPT_POLL_INTERVAL = 2.0  # seconds
