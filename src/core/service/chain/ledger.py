"""Chain ledger for the reward tokens and Genesis NBMons."""

import asyncio
from decimal import Decimal
from typing import Any, Awaitable, Dict, Optional, Set

from web3 import AsyncWeb3, Web3
from eth_account import Account
from eth_utils import is_address

from src.core.exceptions.base import (
    InvalidArgumentError,
    ServiceErrorCode,
    UpstreamFailureError,
)
from src.core.logger.logger import get_logger
from src.core.service.currency.models import Currency
from src.infra.config.settings import get_settings

logger = get_logger(__name__)
settings = get_settings()

# Only the functions the web app calls
ERC20_ABI = [
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "allowance",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "mint",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [],
    },
    {
        "name": "transferFrom",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "from", "type": "address"},
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]

ERC721_BALANCE_ABI = [
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "owner", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]


def to_token_units(amount: float) -> int:
    """Whole-token amount to base units (18 decimals)"""
    return Web3.to_wei(Decimal(str(amount)), "ether")


def from_token_units(value: int) -> float:
    return float(Web3.from_wei(value, "ether"))


def checksum(address: str) -> str:
    if not address or not is_address(address):
        raise InvalidArgumentError(
            "Invalid EVM address",
            code=ServiceErrorCode.INVALID_ADDRESS,
            details={"address": address},
        )
    return Web3.to_checksum_address(address)


class PendingTransaction:
    """
    A sent transaction whose confirmation runs in the background.

    Callers may `await wait()` for the receipt or poll `done()` / `status`.
    A confirmation failure nobody awaits is still logged.
    """

    # Strong references so running confirmations are not garbage collected
    _tasks: Set[asyncio.Task] = set()

    def __init__(self, tx_hash: str, confirmation: Awaitable[Dict[str, Any]], label: str = "transaction"):
        self.tx_hash = tx_hash
        self.label = label
        self._task = asyncio.ensure_future(confirmation)
        PendingTransaction._tasks.add(self._task)
        self._task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        PendingTransaction._tasks.discard(task)
        if task.cancelled():
            logger.warning(f"{self.label} confirmation cancelled", extra={"tx_hash": self.tx_hash})
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"{self.label} confirmation failed",
                extra={
                    "tx_hash": self.tx_hash,
                    "error": str(error)
                }
            )
        else:
            logger.info(f"{self.label} confirmed", extra={"tx_hash": self.tx_hash})

    def done(self) -> bool:
        return self._task.done()

    @property
    def status(self) -> str:
        """pending, confirmed or failed"""
        if not self._task.done():
            return "pending"
        if self._task.cancelled() or self._task.exception() is not None:
            return "failed"
        return "confirmed"

    async def wait(self) -> Dict[str, Any]:
        """The transaction receipt; raises what the confirmation raised"""
        return await asyncio.shield(self._task)


class ChainLedger:
    """
    Reads balances and sends custodial transactions for the web app.

    The admin signer mints reward tokens and pulls deposits through
    `transferFrom`, so deposit allowances are granted to the signer.
    """

    def __init__(
        self,
        w3: Optional[AsyncWeb3] = None,
        private_key: Optional[str] = None,
        token_addresses: Optional[Dict[Currency, Optional[str]]] = None,
        nft_address: Optional[str] = None,
        treasury_address: Optional[str] = None,
        chain_id: Optional[int] = None,
    ):
        self.w3 = w3 or AsyncWeb3(
            AsyncWeb3.AsyncHTTPProvider(
                settings.CHAIN_RPC_URL,
                request_kwargs={"timeout": settings.CHAIN_RPC_TIMEOUT},
            )
        )
        self.chain_id = chain_id or settings.CHAIN_ID
        self.rpc_timeout = settings.CHAIN_RPC_TIMEOUT
        self.confirmation_timeout = settings.TX_CONFIRMATION_TIMEOUT

        key = private_key or settings.ADMIN_PRIVATE_KEY
        self.account = Account.from_key(key) if key else None
        if self.account is None:
            logger.warning("ADMIN_PRIVATE_KEY not configured - minting and deposits disabled")

        if token_addresses is None:
            token_addresses = {
                Currency.XRES: settings.REALM_SHARDS_ADDRESS,
                Currency.XREC: settings.REALM_CRYSTALS_ADDRESS,
            }
        self.token_addresses = {c: a for c, a in token_addresses.items() if a}
        self.nft_address = nft_address or settings.GENESIS_NBMON_ADDRESS

        treasury = treasury_address or settings.TREASURY_ADDRESS
        if not treasury and self.account is not None:
            treasury = self.account.address
        self.treasury_address = treasury

        # One signer, so sends are serialized to keep nonces in order
        self._send_lock = asyncio.Lock()

    def has_token(self, currency: Currency) -> bool:
        return Currency.parse(currency) in self.token_addresses

    def _token(self, currency: Currency):
        currency = Currency.parse(currency)
        address = self.token_addresses.get(currency)
        if not address:
            raise UpstreamFailureError(
                f"{currency.token_symbol} token is not configured",
                code=ServiceErrorCode.SERVICE_UNAVAILABLE,
            )
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=ERC20_ABI)

    def _signer(self):
        if self.account is None:
            raise UpstreamFailureError(
                "Chain signer is not configured",
                code=ServiceErrorCode.SERVICE_UNAVAILABLE,
            )
        return self.account

    async def _rpc(self, call: Awaitable[Any], operation: str, timeout: Optional[float] = None) -> Any:
        """Await an RPC call under a timeout, mapping failures to UpstreamFailureError"""
        try:
            return await asyncio.wait_for(call, timeout or self.rpc_timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Chain {operation} timed out")
            raise UpstreamFailureError(f"Chain {operation} timed out", code=ServiceErrorCode.TIMEOUT) from e
        except (InvalidArgumentError, UpstreamFailureError):
            raise
        except Exception as e:
            logger.error(f"Chain {operation} failed: {e}")
            raise UpstreamFailureError(
                f"Chain {operation} failed: {e}",
                code=ServiceErrorCode.RPC_ERROR,
            ) from e

    async def balance_of(self, currency: Currency, address: str) -> float:
        """Token balance of `address` in whole tokens"""
        owner = checksum(address)
        raw = await self._rpc(self._token(currency).functions.balanceOf(owner).call(), "balanceOf")
        return from_token_units(raw)

    async def allowance(self, currency: Currency, owner: str) -> float:
        """How much of `owner`'s tokens the signer may pull"""
        owner = checksum(owner)
        spender = self._signer().address
        raw = await self._rpc(self._token(currency).functions.allowance(owner, spender).call(), "allowance")
        return from_token_units(raw)

    async def nft_balance(self, address: str) -> int:
        """Number of Genesis NBMons owned by `address`"""
        if not self.nft_address:
            raise UpstreamFailureError(
                "Genesis NBMon contract is not configured",
                code=ServiceErrorCode.SERVICE_UNAVAILABLE,
            )
        owner = checksum(address)
        contract = self.w3.eth.contract(
            address=Web3.to_checksum_address(self.nft_address),
            abi=ERC721_BALANCE_ABI,
        )
        return int(await self._rpc(contract.functions.balanceOf(owner).call(), "nft balanceOf"))

    async def latest_block_timestamp(self) -> int:
        block = await self._rpc(self.w3.eth.get_block("latest"), "get_block")
        return int(block["timestamp"])

    async def _send(self, function, label: str) -> str:
        """Build, sign and broadcast a contract call from the signer; returns the tx hash"""
        account = self._signer()
        async with self._send_lock:
            nonce = await self._rpc(
                self.w3.eth.get_transaction_count(account.address, "pending"),
                "get_transaction_count",
            )
            transaction = await self._rpc(
                function.build_transaction({
                    "from": account.address,
                    "nonce": nonce,
                    "chainId": self.chain_id,
                }),
                f"{label} build",
            )
            signed = account.sign_transaction(transaction)
            tx_hash = await self._rpc(self.w3.eth.send_raw_transaction(signed.raw_transaction), f"{label} send")

        tx_hex = Web3.to_hex(tx_hash)
        logger.info(f"{label} transaction sent", extra={"tx_hash": tx_hex, "nonce": nonce})
        return tx_hex

    async def _confirm(self, tx_hash: str, label: str) -> Dict[str, Any]:
        receipt = await self._rpc(
            self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.confirmation_timeout),
            f"{label} confirmation",
            timeout=self.confirmation_timeout + self.rpc_timeout,
        )
        if receipt.get("status") != 1:
            raise UpstreamFailureError(
                f"{label} transaction reverted",
                code=ServiceErrorCode.TRANSACTION_FAILED,
                details={"tx_hash": tx_hash},
            )
        return dict(receipt)

    async def mint(self, currency: Currency, to: str, amount: float) -> str:
        """Mint `amount` tokens to `to` and wait for confirmation; returns the tx hash"""
        function = self._token(currency).functions.mint(checksum(to), to_token_units(amount))
        tx_hash = await self._send(function, "mint")
        await self._confirm(tx_hash, "mint")
        return tx_hash

    async def send_mint(self, currency: Currency, to: str, amount: float) -> PendingTransaction:
        """Mint without waiting; confirmation continues in the background"""
        function = self._token(currency).functions.mint(checksum(to), to_token_units(amount))
        tx_hash = await self._send(function, "mint")
        return PendingTransaction(tx_hash, self._confirm(tx_hash, "fee mint"), label="fee mint")

    async def transfer_from(self, currency: Currency, owner: str, amount: float) -> str:
        """Pull `amount` tokens from `owner` to the treasury and wait for confirmation"""
        if not self.treasury_address:
            raise UpstreamFailureError(
                "Treasury address is not configured",
                code=ServiceErrorCode.SERVICE_UNAVAILABLE,
            )
        function = self._token(currency).functions.transferFrom(
            checksum(owner),
            Web3.to_checksum_address(self.treasury_address),
            to_token_units(amount),
        )
        tx_hash = await self._send(function, "transferFrom")
        await self._confirm(tx_hash, "transferFrom")
        return tx_hash

    async def is_connected(self) -> bool:
        try:
            return bool(await asyncio.wait_for(self.w3.is_connected(), self.rpc_timeout))
        except Exception as e:
            logger.warning(f"Chain RPC unreachable: {e}")
            return False
