"""
Swap tool: builds approve + swap calls for an ERC20 token swap.
"""

import asyncio
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Any, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from .aggregator import AggregatorClient
from .exceptions import AggregatorError, TokenNotSupportedError
from .models import ToolResponse
from .tools import BaseTool, ToolDescriptor, create_error_response
from .validation import is_valid_address


class Token(BaseModel):
    """Token entry from the aggregator catalog."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    address: str
    symbol: str
    name: str = ""
    decimals: int
    logo_uri: Optional[str] = Field(default=None, alias="logoURI")


class SwapParameters(BaseModel):
    """Parameters of the ``swap`` tool as produced by the action agent."""
    model_config = ConfigDict(populate_by_name=True)

    sell_token_symbol: str = Field(alias="sellTokenSymbol", min_length=1)
    buy_token_symbol: str = Field(alias="buyTokenSymbol", min_length=1)
    sell_amount: Decimal = Field(alias="sellAmount", gt=0)
    taker_address: Optional[str] = Field(default=None, alias="takerAddress")


def format_token_amount(amount: Any, decimals: int) -> str:
    """Convert a human decimal amount into base units, e.g. ``("0.5", 6) -> "500000"``.

    Digits beyond the token's precision are dropped.
    """
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {amount}")
    if value < 0:
        raise ValueError(f"Invalid amount: {amount}")

    whole, _, fraction = format(value, "f").partition(".")
    fraction = fraction[:decimals].ljust(decimals, "0")
    return str(int(whole + fraction))


def format_units(value: Any, decimals: int) -> str:
    """Convert base units into a decimal string, e.g. ``("1500000", 6) -> "1.5"``."""
    amount = int(value)
    sign = "-" if amount < 0 else ""
    amount = abs(amount)
    base = 10 ** decimals
    whole, remainder = divmod(amount, base)
    fraction = str(remainder).zfill(decimals).rstrip("0") if decimals else ""
    return f"{sign}{whole}.{fraction or '0'}"


class TokenService:
    """Caches the aggregator token catalog, indexed by lowercase symbol."""

    def __init__(self, client: AggregatorClient, logger: logging.Logger):
        self.client = client
        self.logger = logger
        self._cache: Dict[str, Token] = {}

    @property
    def loaded(self) -> bool:
        return bool(self._cache)

    async def initialize_tokens(self) -> None:
        """Fetch the token list and rebuild the cache."""
        try:
            # requests is blocking; keep it off the event loop
            data = await asyncio.to_thread(self.client.get_tokens)
            tokens = data.get("tokens", {})
            entries = tokens.values() if isinstance(tokens, dict) else tokens
            cache = {}
            for entry in entries:
                token = Token.model_validate(entry)
                cache[token.symbol.lower()] = token
        except Exception as e:
            raise AggregatorError(f"Failed to initialize tokens: {str(e)}")

        self._cache = cache
        self.logger.info(f"Loaded {len(cache)} tokens for chain {self.client.chain_id}")

    async def ensure_loaded(self) -> None:
        if not self.loaded:
            await self.initialize_tokens()

    def get_token(self, symbol: str) -> Optional[Token]:
        return self._cache.get(symbol.lower())

    def validate_token_pair(self, sell_symbol: str, buy_symbol: str) -> Tuple[Token, Token]:
        """Resolve both sides of a trade or raise TokenNotSupportedError."""
        sell_token = self.get_token(sell_symbol)
        buy_token = self.get_token(buy_symbol)

        if sell_token is None:
            raise TokenNotSupportedError(f"Sell token {sell_symbol} not supported", sell_symbol)
        if buy_token is None:
            raise TokenNotSupportedError(f"Buy token {buy_symbol} not supported", buy_symbol)

        return sell_token, buy_token


class SwapService:
    """Builds the approve and swap calls for one wallet."""

    def __init__(self, wallet_address: str, client: AggregatorClient, token_service: TokenService,
                 logger: logging.Logger):
        self.wallet_address = wallet_address
        self.client = client
        self.token_service = token_service
        self.logger = logger

    async def build_swap_transaction(self, params: SwapParameters) -> ToolResponse:
        """Build a token swap; failures become a failure response."""
        try:
            await self.token_service.ensure_loaded()

            sell_token, buy_token = self.token_service.validate_token_pair(
                params.sell_token_symbol, params.buy_token_symbol
            )
            sell_amount = format(params.sell_amount, "f")
            base_amount = format_token_amount(sell_amount, sell_token.decimals)

            approve_data = await asyncio.to_thread(self.client.get_approval_transaction, sell_token.address)
            swap_data = await asyncio.to_thread(
                self.client.get_swap,
                src=sell_token.address,
                dst=buy_token.address,
                amount=base_amount,
                from_address=self.wallet_address,
            )

            tx = swap_data.get("tx") or {}
            dst_amount = swap_data["dstAmount"]
            buy_amount = format_units(dst_amount, buy_token.decimals)

            calls = [
                {
                    "to": approve_data["to"],
                    "data": approve_data["data"],
                    "value": "0",
                },
                {
                    "to": tx["to"],
                    "data": tx["data"],
                    "value": str(int(tx.get("value") or "0")),
                },
            ]

            self.logger.info(f"Constructed swap of {sell_amount} {sell_token.symbol} for {buy_token.symbol}")
            return ToolResponse(
                status="success",
                data_for_agent={
                    "message": f"Successfully constructed swap transaction for {sell_amount} {sell_token.symbol} for {buy_token.symbol}",
                    "sellAmount": sell_amount,
                    "sellToken": sell_token.symbol,
                    "buyToken": buy_token.symbol,
                    "buyAmount": buy_amount,
                },
                data_for_user={
                    "calls": calls,
                    "metadata": {
                        "sellAmount": sell_amount,
                        "sellToken": sell_token.symbol,
                        "buyToken": buy_token.symbol,
                        "buyAmount": buy_amount,
                        "buyAmountWithDecimals": dst_amount,
                        "fromToken": sell_token.model_dump(by_alias=True, exclude_none=True),
                        "toToken": buy_token.model_dump(by_alias=True, exclude_none=True),
                        "beneficiary": self.wallet_address,
                    },
                },
            )

        except Exception as e:
            self.logger.error(f"Swap construction failed ({type(e).__name__}): {str(e)}")
            return create_error_response(e, "swap execution")


class SwapTool(BaseTool):
    """The ``swap`` tool exposed to the action agent."""

    name = "swap"
    description = "Swap ERC20 tokens"
    parameters = {
        "sellTokenSymbol": "string - The symbol of the token to sell",
        "buyTokenSymbol": "string - The symbol of the token to buy",
        "sellAmount": "string - The amount of tokens to sell",
        "takerAddress": "string - The address of the taker",
    }

    def __init__(self, client: AggregatorClient, logger: logging.Logger, token_service: Optional[TokenService] = None):
        """Initialize the swap tool."""
        super().__init__(logger)
        self.client = client
        self.token_service = token_service or TokenService(client, logger)

    async def execute(self, parameters: Any) -> ToolResponse:
        """Validate the parameter object and build the swap."""
        if not isinstance(parameters, dict):
            return create_error_response(ValueError("Swap parameters must be an object"), "parameter validation")

        try:
            params = SwapParameters.model_validate(parameters)
        except PydanticValidationError as e:
            fields = ", ".join(".".join(str(part) for part in error["loc"]) for error in e.errors())
            return self._handle_error(ValueError(f"Invalid swap parameters: {fields}"), "parameter validation")

        if not params.taker_address:
            return self._handle_error(ValueError("Wallet address not configured"), "swap execution")
        if not is_valid_address(params.taker_address):
            return self._handle_error(ValueError(f"Invalid taker address: {params.taker_address}"), "swap execution")

        service = SwapService(params.taker_address, self.client, self.token_service, self.logger)
        return await service.build_swap_transaction(params)


def create_swap_tool(client: AggregatorClient, logger: logging.Logger) -> ToolDescriptor:
    """Create the ``swap`` tool descriptor."""
    return SwapTool(client, logger).descriptor()
