#!/usr/bin/env python3
"""
Sui Transaction Explainer - Base Class

Base class providing common functionality for the Sui tools.
"""

from typing import Dict, Optional
from abc import ABC

from sui_utils import SUI_RPC_URL, DEFAULT_HEADERS, API_TIMEOUT_DEFAULT


class SuiTool(ABC):
    """
    Base class for the Sui tools.

    Holds the JSON-RPC endpoint and request headers shared by the reader and explainer.
    """

    def __init__(self, rpc_url: Optional[str] = None,
                 headers: Optional[Dict[str, str]] = None) -> None:
        """
        Initialize the Sui tool.

        Args:
            rpc_url: Optional custom fullnode URL (defaults to SUI_RPC_URL)
            headers: Optional custom headers (defaults to DEFAULT_HEADERS)
        """
        self.rpc_url: str = rpc_url or SUI_RPC_URL
        self.headers: Dict[str, str] = headers or DEFAULT_HEADERS.copy()

    def get_api_timeout(self) -> int:
        """Request timeout in seconds (from config or defaults)"""
        return API_TIMEOUT_DEFAULT

    def __repr__(self) -> str:
        """String representation of the tool"""
        return f"{self.__class__.__name__}(rpc_url={self.rpc_url})"
