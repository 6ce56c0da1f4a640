#!/usr/bin/env python3
"""
Sui Transaction Reader

Fetches a transaction block from a Sui fullnode over JSON-RPC, with every
display option the explainer needs turned on.
"""

import re
from typing import Dict, Optional, Any

import requests

from sui_utils import (
    SuiAPIError, NetworkError, TransactionNotFoundError, InvalidInputError, logger
)
from sui_base import SuiTool

# Transaction digests are base58-encoded 32-byte hashes
DIGEST_PATTERN = re.compile(r'(?<![1-9A-HJ-NP-Za-km-z])[1-9A-HJ-NP-Za-km-z]{43,44}(?![1-9A-HJ-NP-Za-km-z])')

TRANSACTION_BLOCK_OPTIONS = {
    'showInput': True,
    'showEffects': True,
    'showEvents': True,
    'showObjectChanges': True,
    'showBalanceChanges': True,
}


class SuiTransactionReader(SuiTool):
    def __init__(self, rpc_url: Optional[str] = None,
                 headers: Optional[Dict[str, str]] = None) -> None:
        """Initialize the transaction reader"""
        super().__init__(rpc_url, headers)
        self._request_id = 0

    def extract_digest_from_input(self, input_str: str) -> str:
        """
        Extract or validate a transaction digest from an explorer URL or direct digest input.

        Args:
            input_str: Explorer URL (suiscan, suivision, ...) or transaction digest

        Returns:
            Valid transaction digest string

        Raises:
            InvalidInputError: If no valid digest can be extracted
        """
        match = DIGEST_PATTERN.search(input_str.strip())
        if match:
            return match.group(0)
        raise InvalidInputError("Could not extract or find a valid transaction digest. Please provide "
                                "either an explorer URL or a base58 transaction digest")

    def call_rpc(self, method: str, params: list) -> Any:
        """
        Perform one JSON-RPC call against the fullnode.

        Raises:
            SuiAPIError: If the node returns an error object
            NetworkError: If the request fails
        """
        self._request_id += 1
        payload = {'jsonrpc': '2.0', 'id': self._request_id, 'method': method, 'params': params}

        try:
            response = requests.post(self.rpc_url, json=payload, headers=self.headers,
                                     timeout=self.get_api_timeout())
            response.raise_for_status()
        except requests.RequestException as e:
            raise NetworkError(f"Failed to call {method}: {e}", original_error=e)

        try:
            data = response.json()
        except ValueError as e:
            raise SuiAPIError(f"Malformed response from {method}: {e}")
        if not isinstance(data, dict):
            raise SuiAPIError(f"Malformed response from {method}: expected a JSON object")

        if 'error' in data:
            error = data['error']
            message = error.get('message', str(error)) if isinstance(error, dict) else str(error)
            raise SuiAPIError(f"API Error: {message}", api_error=message)

        return data.get('result')

    def get_transaction_block(self, digest: str) -> Dict[str, Any]:
        """
        Fetch a transaction block with inputs, effects, events, object and balance changes.

        Raises:
            TransactionNotFoundError: If the node does not know the digest
            SuiAPIError: If the node returns any other error
            NetworkError: If the request fails
        """
        logger.debug(f"Fetching transaction block {digest} from {self.rpc_url}")
        try:
            result = self.call_rpc('sui_getTransactionBlock', [digest, TRANSACTION_BLOCK_OPTIONS])
        except SuiAPIError as e:
            # fullnodes answer "Could not find the referenced transaction ..."
            message = (e.api_error or str(e)).lower()
            if 'not find' in message or 'not found' in message:
                raise TransactionNotFoundError(f"Transaction not found for digest: {digest}") from e
            raise

        if not result:
            raise TransactionNotFoundError(f"Transaction not found for digest: {digest}")
        return result
