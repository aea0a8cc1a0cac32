"""
REST client for the 1inch swap API.
"""

import logging
import requests
from typing import Dict, Any, Optional

from .config import AggregatorConfig
from .exceptions import AggregatorError


class AggregatorClient:
    """Thin keyed client for token listing, approval and swap construction."""

    API_VERSION = "v6.0"

    def __init__(self, config: AggregatorConfig, logger: logging.Logger, session: Optional[requests.Session] = None):
        """Initialize the aggregator client."""
        self.config = config
        self.logger = logger
        self.chain_id = config.chain_id
        self.timeout = config.timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {config.api_key}",
            "Content-Type": "application/json",
        })

    def _url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/swap/{self.API_VERSION}/{self.chain_id}/{path}"

    def _get(self, path: str, operation: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = self._url(path)
        self.logger.info(f"{operation} request: GET {url}")
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            self.logger.error(f"{operation} request failed: {str(e)}")
            raise AggregatorError(f"{operation} request failed: {str(e)}")

        if not response.ok:
            self.logger.error(f"{operation} API responded with status: {response.status_code}")
            raise AggregatorError(f"{operation} API responded with status: {response.status_code}", response.status_code)

        return response.json()

    def get_tokens(self) -> Dict[str, Any]:
        """Fetch the token catalog for the configured chain."""
        return self._get("tokens", "Tokens")

    def get_approval_transaction(self, token_address: str) -> Dict[str, Any]:
        """Fetch an (unlimited) approval transaction for the router."""
        return self._get("approve/transaction", "Approve", {"tokenAddress": token_address})

    def get_swap(self, src: str, dst: str, amount: str, from_address: str, slippage: Optional[float] = None) -> Dict[str, Any]:
        """Fetch swap calldata; on-chain estimation is disabled for smart accounts."""
        params = {
            "src": src,
            "dst": dst,
            "amount": amount,
            "from": from_address,
            "slippage": str(self.config.slippage if slippage is None else slippage),
            "includeTokensInfo": "true",
            "origin": from_address,
            "disableEstimate": "true",
        }
        return self._get("swap", "Swap", params)
