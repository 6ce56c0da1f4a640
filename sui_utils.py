#!/usr/bin/env python3
"""
Sui Transaction Explainer - Shared Utilities

Common functions, lookup tables and constants used across the explainer modules.
"""

import logging
import os
import yaml
from pathlib import Path
from datetime import datetime
from decimal import Decimal, getcontext
from types import MappingProxyType
from typing import Dict, Optional, Any, Mapping, Union
import pytz

# Set up basic logging first (before config loading)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)

# 1 SUI = 1_000_000_000 MIST
MIST_PER_SUI = 10 ** 9


# Custom exception classes
class SuiToolError(Exception):
    """Base exception for all Sui Transaction Explainer errors"""
    pass


class SuiAPIError(SuiToolError):
    """Raised when the Sui JSON-RPC endpoint returns an error"""
    def __init__(self, message: str, api_error: Optional[str] = None):
        super().__init__(message)
        self.api_error = api_error


class NetworkError(SuiToolError):
    """Raised when network requests fail"""
    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


class TransactionNotFoundError(SuiToolError):
    """Raised when a transaction cannot be found"""
    pass


class IncompleteTransactionError(SuiToolError):
    """Raised when a transaction record lacks effects or call-context data"""
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidInputError(SuiToolError):
    """Raised when user input is invalid"""
    pass


# Configuration loading
def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Optional path to a YAML file. Defaults to $SUI_EXPLAINER_CONFIG,
            then config.yaml next to this module.

    Returns:
        Parsed configuration dict, or {} if the file is missing or unreadable
    """
    if config_path is None:
        env_path = os.environ.get('SUI_EXPLAINER_CONFIG')
        config_path = Path(env_path) if env_path else Path(__file__).parent / "config.yaml"
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        # Return defaults if config file doesn't exist
        return {}

    try:
        with open(config_path, 'r') as f:
            loaded = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load config file {config_path}: {e}")
        return {}

    if not isinstance(loaded, dict):
        logger.warning(f"Ignoring config file {config_path}: top level is not a mapping")
        return {}
    return loaded


# Load configuration
_config = load_config()

# Reconfigure logging with config if available
_log_config = _config.get('logging', {})
if _log_config:
    log_level = getattr(logging, _log_config.get('level', 'INFO').upper(), logging.INFO)
    log_format = _log_config.get('format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    log_datefmt = _log_config.get('datefmt', '%Y-%m-%d %H:%M:%S')
    logging.basicConfig(level=log_level, format=log_format, datefmt=log_datefmt, force=True)

# Set precision for decimal calculations (with config override support)
_precision = _config.get('decimal_precision', 50)
getcontext().prec = _precision

# Constants (with config override support)
SUI_RPC_URL = _config.get('api', {}).get('rpc_url', "https://fullnode.mainnet.sui.io:443")

# Timeout values (with config override support)
_api_timeout_config = _config.get('api', {}).get('timeout', {})
API_TIMEOUT_DEFAULT = _api_timeout_config.get('default', 10)

# Default headers for API requests
DEFAULT_HEADERS = _config.get('api', {}).get('headers', {
    'Content-Type': 'application/json',
    'User-Agent': 'sui-transaction-explainer/1.0',
})

# Popular Sui coin symbols -> display names (with config override support)
TOKEN_DISPLAY_NAMES: Mapping[str, str] = MappingProxyType(_config.get('tokens', {
    'SUI': 'SUI',
    'USDC': 'USDC',
    'USDT': 'USDT',
    'WETH': 'WETH',
    'WBTC': 'WBTC',
    'CETUS': 'CETUS',
    'TURBOS': 'TURBOS',
    'KRIYA': 'KRIYA',
    'FLOWX': 'FLOWX',
    'AFTERMATH': 'AFTERMATH',
    'LOFI': 'LOFI',
    'BUCK': 'BUCK',
    'NAVX': 'NAVX',
    'HAY': 'HAY',
    'DEEP': 'DEEP',
    'MOVE': 'MOVE',
    'FUD': 'FUD',
    'BONK': 'BONK',
    'PEPE': 'PEPE',
    'DOGE': 'DOGE',
    'SHIB': 'SHIB',
}))

# Static USD prices keyed by coin display type. Approximate, not a live feed.
STATIC_PRICES: Mapping[str, float] = MappingProxyType(_config.get('prices', {
    'SUI Coin': 2.50,
    'USDC Coin': 1.00,
    'USDT Coin': 1.00,
    'WETH Coin': 3500.00,
    'WBTC Coin': 65000.00,
    'CETUS Coin': 0.15,
    'TURBOS Coin': 0.05,
    'KRIYA Coin': 0.25,
    'FLOWX Coin': 0.10,
    'LOFI Coin': 0.02,
    'BUCK Coin': 1.00,
    'NAVX Coin': 0.30,
    'HAY Coin': 1.00,
    'DEEP Coin': 0.08,
    'MOVE Coin': 0.12,
    'FUD Coin': 0.001,
    'BONK Coin': 0.00002,
    'PEPE Coin': 0.000001,
    'DOGE Coin': 0.08,
    'SHIB Coin': 0.00001,
}))

# Average gas costs for different transaction types (in SUI)
AVERAGE_GAS_COSTS: Mapping[str, float] = MappingProxyType(_config.get('gas_averages', {
    'transfer': 0.001,
    'swap': 0.01,
    'liquidity': 0.015,
    'nft_mint': 0.005,
    'nft_transfer': 0.001,
    'flashloan': 0.02,
    'default': 0.01,
}))


def format_address(address: str) -> str:
    """Shorten a long address to 0x1234...abcd form"""
    if len(address) > 20:
        return f"{address[:6]}...{address[-4:]}"
    return address


def parse_int(value: Any, default: int = 0) -> int:
    """
    Parse an integer that may be string-encoded (u64 values arrive as strings).

    Raises:
        ValueError: If the value is present but not an integer
    """
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        raise ValueError(f"Expected an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value.strip(), 10)
    raise ValueError(f"Expected an integer, got {value!r}")


def format_mist(amount: int) -> str:
    """
    Format a MIST amount as SUI with exactly 6 decimal places.

    The sign is preserved, so a net rebate renders as e.g. "-0.000100".
    """
    formatted = Decimal(amount) / Decimal(MIST_PER_SUI)
    return f"{formatted:.6f}"


def format_usd(value: float) -> str:
    """
    Format an approximate USD value for display.

    Returns:
        "< $0.01" below one cent, 3 decimals below $1, 2 decimals below $1000,
        otherwise thousands with a K suffix
    """
    if value < 0.01:
        return '< $0.01'
    elif value < 1:
        return f"${value:.3f}"
    elif value < 1000:
        return f"${value:.2f}"
    else:
        return f"${value / 1000:.2f}K"


def format_timestamp(timestamp_ms: int, include_utc: bool = True) -> str:
    """
    Convert a millisecond timestamp to human-readable format with both local and UTC times.

    Args:
        timestamp_ms: Milliseconds since the Unix epoch
        include_utc: If True, include both local and UTC times (default: True)

    Returns:
        Formatted timestamp string
    """
    try:
        # Create UTC datetime
        dt_utc = datetime.fromtimestamp(timestamp_ms / 1000, tz=pytz.UTC)

        # Get local timezone
        local_tz = datetime.now().astimezone().tzinfo

        # Convert to local time
        dt_local = dt_utc.astimezone(local_tz)

        if include_utc:
            utc_str = dt_utc.strftime("%B %d, %Y at %I:%M:%S %p UTC")
            local_str = dt_local.strftime("%B %d, %Y at %I:%M:%S %p %Z")
            return f"{local_str} / {utc_str}"
        else:
            return dt_local.strftime("%B %d, %Y at %I:%M:%S %p %Z")
    except (OverflowError, OSError, ValueError) as e:
        return f"Unknown timestamp (Error: {e})"
