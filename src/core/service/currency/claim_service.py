"""
Claiming and depositing reward currencies.

Claim: the player's off-chain xRES/xREC becomes on-chain RES/REC. The
tokens are minted first and the off-chain balance is only debited once the
mint shows up in the on-chain balance, so a failed mint never costs the
player their claim.

Deposit: on-chain RES/REC is pulled to the treasury through an allowance
granted to the signer, then credited as off-chain xRES/xREC.

Both run under the account lock so the check-then-act sequence cannot
interleave with another claim or deposit for the same address.
"""

import asyncio
import time
from typing import Callable, Optional, Tuple

from src.core.exceptions.base import (
    InconsistentStateError,
    InvalidArgumentError,
    NotEligibleError,
    ServiceError,
    ServiceErrorCode,
)
from src.core.logger.logger import get_logger
from src.core.service.account.models import WebAppData
from src.core.service.account.playfab_client import PlayFabClient
from src.core.service.chain.ledger import ChainLedger, PendingTransaction
from src.core.service.currency.account_lock import AccountLock
from src.core.service.currency.models import (
    ClaimCooldown,
    ClaimingCheck,
    ClaimResult,
    Currency,
    CurrencyTransactions,
    DepositResult,
    WebAppOverview,
)
from src.core.service.currency.rules import (
    is_on_cooldown,
    is_within_limits,
    remaining_cooldown,
    split_claim_fee,
)
from src.core.service.tier.benefits import get_claiming_fee_and_limits, get_tier_benefits
from src.core.service.tier.models import WebAppTier
from src.core.service.tier.tier_service import TierService, normalize_address
from src.infra.repository.web_app_data_repository import WebAppDataRepository

logger = get_logger(__name__)


def _last_claim_time(record: WebAppData, currency: Currency) -> int:
    if currency is Currency.XRES:
        return record.last_xres_claim_time
    return record.last_xrec_claim_time


def _validate_amount(amount: float) -> None:
    if amount is None or amount <= 0:
        raise InvalidArgumentError("Amount must be greater than 0", details={"amount": amount})


class ClaimService:
    def __init__(
        self,
        web_app_repository: WebAppDataRepository,
        playfab: PlayFabClient,
        ledger: ChainLedger,
        tier_service: TierService,
        account_lock: AccountLock,
        clock: Callable[[], float] = time.time,
    ):
        self.web_app_repository = web_app_repository
        self.playfab = playfab
        self.ledger = ledger
        self.tier_service = tier_service
        self.account_lock = account_lock
        self.clock = clock

    def _now(self) -> int:
        return int(self.clock())

    def _check(self, record: WebAppData, currency: Currency, amount: float, now: int) -> ClaimingCheck:
        benefits = get_tier_benefits(record.web_app_tier or WebAppTier.NEWCOMER)
        return ClaimingCheck(
            on_cooldown=is_on_cooldown(_last_claim_time(record, currency), benefits.claim_cooldown, now),
            claimable=record.can_claim,
            is_within_limits=is_within_limits(benefits, currency, amount),
        )

    async def claiming_check(self, currency: str, amount: float, playfab_id: str) -> ClaimingCheck:
        """Evaluate the three claim gates without claiming anything"""
        currency = Currency.parse(currency)
        address = await self.playfab.get_evm_address(playfab_id)
        record = await self.web_app_repository.require_by_address(address)
        return self._check(record, currency, amount, self._now())

    def _authorize(self, record: WebAppData, currency: Currency, amount: float, now: int) -> None:
        check = self._check(record, currency, amount, now)
        if not check.claimable:
            raise NotEligibleError(
                "User is not allowed to claim. Please check the requirements.",
                code=ServiceErrorCode.CLAIM_NOT_ALLOWED,
                details={"address": record.address},
            )
        if check.on_cooldown:
            benefits = get_tier_benefits(record.web_app_tier or WebAppTier.NEWCOMER)
            raise NotEligibleError(
                f"Claiming {currency.balance_key} is on cooldown",
                code=ServiceErrorCode.CLAIM_ON_COOLDOWN,
                details={
                    "remaining_seconds": remaining_cooldown(
                        _last_claim_time(record, currency), benefits.claim_cooldown, now
                    )
                },
            )
        if not check.is_within_limits:
            info = get_claiming_fee_and_limits(record.web_app_tier or WebAppTier.NEWCOMER)
            raise InvalidArgumentError(
                "Amount is outside the claim limits of the current tier",
                code=ServiceErrorCode.AMOUNT_OUT_OF_LIMITS,
                details=info.model_dump(),
            )

    async def claim_currency(self, currency: str, amount: float, playfab_id: str) -> ClaimResult:
        """Claim `amount` of off-chain currency as on-chain tokens, minus the tier fee"""
        result, _ = await self.claim_currency_with_fee_mint(currency, amount, playfab_id)
        return result

    async def claim_currency_with_fee_mint(
        self, currency: str, amount: float, playfab_id: str
    ) -> Tuple[ClaimResult, Optional[PendingTransaction]]:
        """
        Claim, also handing back the treasury fee mint so the caller can await
        or poll its confirmation. The handle is None when there was no fee or it
        could not be sent.

        Raises:
            NotEligibleError: claim gate closed, on cooldown, or a claim already running
            InvalidArgumentError: amount outside tier limits or above the off-chain balance
            InconsistentStateError: the mint did not change the balance, another claim was
                recorded in between, or the off-chain debit failed (details carry the tx hash)
        """
        currency = Currency.parse(currency)
        _validate_amount(amount)
        address = await self.playfab.get_evm_address(playfab_id)

        async with self.account_lock.hold(address):
            record = await self.web_app_repository.require_by_address(address)
            now = self._now()
            self._authorize(record, currency, amount, now)

            balance = await self.playfab.get_currency_balance(playfab_id, currency)
            if balance < amount:
                raise InvalidArgumentError(
                    f"Not enough {currency.balance_key} to claim",
                    code=ServiceErrorCode.INSUFFICIENT_BALANCE,
                    details={"balance": balance, "amount": amount},
                )

            benefits = get_tier_benefits(record.web_app_tier or WebAppTier.NEWCOMER)
            split = split_claim_fee(amount, benefits.claim_fee)

            balance_before = await self.ledger.balance_of(currency, address)
            user_tx = await self.ledger.mint(currency, address, float(split.user_share))
            balance_after = await self.ledger.balance_of(currency, address)
            if balance_after == balance_before:
                logger.error(
                    "Mint not reflected in on-chain balance",
                    extra={
                        "address": address,
                        "currency": currency.value,
                        "tx_hash": user_tx
                    }
                )
                raise InconsistentStateError(
                    "Minted tokens are not reflected in the balance. Off-chain balance was not debited.",
                    code=ServiceErrorCode.MINT_NOT_REFLECTED,
                    details={"tx_hash": user_tx},
                )

            fee_mint = None
            if split.fee > 0:
                fee_mint = await self._send_fee_mint(currency, float(split.fee), address)

            remaining = balance - amount
            try:
                await self.web_app_repository.record_claim(
                    address, currency, amount, now, _last_claim_time(record, currency)
                )
                await self.playfab.set_currency_balance(playfab_id, currency, remaining)
            except ServiceError as e:
                if e.code == ServiceErrorCode.CLAIM_RECORD_CONFLICT:
                    raise self._claim_conflict(address, currency, amount, user_tx, e) from e
                raise self._offchain_failure("claim", address, currency, amount, user_tx, e) from e

        logger.info(
            "Currency claimed",
            extra={
                "address": address,
                "currency": currency.value,
                "amount": amount,
                "fee": float(split.fee),
                "tx_hash": user_tx
            }
        )
        result = ClaimResult(
            address=address,
            currency=currency,
            amount=amount,
            fee=float(split.fee),
            minted_to_user=float(split.user_share),
            user_mint_tx=user_tx,
            fee_mint_tx=fee_mint.tx_hash if fee_mint else None,
            remaining_balance=remaining,
            claimed_at=now,
        )
        return result, fee_mint

    async def _send_fee_mint(self, currency: Currency, fee: float, address: str) -> Optional[PendingTransaction]:
        """
        Mint the fee share to the treasury; confirmation is not awaited.

        The user's share is already minted, so a failure here is logged and
        the claim continues.
        """
        try:
            pending = await self.ledger.send_mint(currency, self.ledger.treasury_address, fee)
        except ServiceError as e:
            logger.error(
                "Fee mint could not be sent",
                extra={
                    "address": address,
                    "currency": currency.value,
                    "fee": fee,
                    "error": e.message
                }
            )
            return None
        return pending

    def _claim_conflict(
        self,
        address: str,
        currency: Currency,
        amount: float,
        tx_hash: str,
        error: ServiceError,
    ) -> InconsistentStateError:
        # The mint went out but the claim was not recorded and nothing was debited
        logger.error(
            "Claim minted but another claim was recorded first",
            extra={
                "address": address,
                "currency": currency.value,
                "amount": amount,
                "tx_hash": tx_hash,
                "details": error.details
            }
        )
        return InconsistentStateError(
            "Another claim for this account was recorded while this one was running. "
            "Please contact support with the transaction hash.",
            code=ServiceErrorCode.CLAIM_RECORD_CONFLICT,
            details={"tx_hash": tx_hash, "currency": currency.value, "amount": amount},
        )

    def _offchain_failure(
        self,
        operation: str,
        address: str,
        currency: Currency,
        amount: float,
        tx_hash: str,
        error: ServiceError,
    ) -> InconsistentStateError:
        # No rollback of the on-chain side; reconciled manually from this log
        logger.error(
            f"On-chain {operation} succeeded but the off-chain update failed",
            extra={
                "address": address,
                "currency": currency.value,
                "amount": amount,
                "tx_hash": tx_hash,
                "error": error.message,
                "error_code": error.code
            }
        )
        return InconsistentStateError(
            f"The on-chain {operation} went through but the game balance could not be updated. "
            "Please contact support with the transaction hash.",
            code=ServiceErrorCode.OFFCHAIN_UPDATE_FAILED,
            details={"tx_hash": tx_hash, "currency": currency.value, "amount": amount},
        )

    async def deposit_currency(self, currency: str, amount: float, playfab_id: str) -> DepositResult:
        """
        Move `amount` on-chain tokens into the game as off-chain currency

        Raises:
            NotEligibleError: deposit gate closed or a claim already running
            InvalidArgumentError: allowance or on-chain balance below `amount`
            InconsistentStateError: the transfer did not change the balance, or it did
                and the off-chain credit failed
        """
        currency = Currency.parse(currency)
        _validate_amount(amount)
        address = await self.playfab.get_evm_address(playfab_id)

        async with self.account_lock.hold(address):
            record = await self.web_app_repository.require_by_address(address)
            if not record.can_deposit:
                raise NotEligibleError(
                    "User is not allowed to deposit.",
                    code=ServiceErrorCode.DEPOSIT_NOT_ALLOWED,
                    details={"address": address},
                )

            allowance = await self.ledger.allowance(currency, address)
            if allowance < amount:
                raise InvalidArgumentError(
                    f"Insufficient {currency.token_symbol} allowance. Please approve the amount first.",
                    code=ServiceErrorCode.INSUFFICIENT_ALLOWANCE,
                    details={"allowance": allowance, "amount": amount},
                )

            balance_before = await self.ledger.balance_of(currency, address)
            if balance_before < amount:
                raise InvalidArgumentError(
                    f"Not enough {currency.token_symbol} to deposit",
                    code=ServiceErrorCode.INSUFFICIENT_BALANCE,
                    details={"balance": balance_before, "amount": amount},
                )

            tx_hash = await self.ledger.transfer_from(currency, address, amount)
            balance_after = await self.ledger.balance_of(currency, address)
            if balance_after == balance_before:
                logger.error(
                    "Deposit transfer not reflected in on-chain balance",
                    extra={
                        "address": address,
                        "currency": currency.value,
                        "tx_hash": tx_hash
                    }
                )
                raise InconsistentStateError(
                    "Deposited tokens are not reflected in the balance. Off-chain balance was not credited.",
                    code=ServiceErrorCode.TRANSFER_NOT_REFLECTED,
                    details={"tx_hash": tx_hash},
                )

            try:
                current = await self.playfab.get_currency_balance(playfab_id, currency)
                new_balance = current + amount
                await self.playfab.set_currency_balance(playfab_id, currency, new_balance)
                await self.web_app_repository.record_deposit(address, currency, amount)
            except ServiceError as e:
                raise self._offchain_failure("deposit", address, currency, amount, tx_hash, e) from e

        logger.info(
            "Currency deposited",
            extra={
                "address": address,
                "currency": currency.value,
                "amount": amount,
                "tx_hash": tx_hash
            }
        )
        return DepositResult(
            address=address,
            currency=currency,
            amount=amount,
            deposit_tx=tx_hash,
            new_balance=new_balance,
        )

    async def get_claim_cooldown(self, address: str) -> ClaimCooldown:
        record = await self.web_app_repository.require_by_address(normalize_address(address))
        cooldown = get_tier_benefits(record.web_app_tier or WebAppTier.NEWCOMER).claim_cooldown
        now = self._now()
        return ClaimCooldown(
            xres_cooldown=remaining_cooldown(record.last_xres_claim_time, cooldown, now),
            xrec_cooldown=remaining_cooldown(record.last_xrec_claim_time, cooldown, now),
        )

    async def get_web_app_overview(self, address: str) -> WebAppOverview:
        """Dashboard data of a linked account"""
        address = normalize_address(address)
        record = await self.web_app_repository.require_by_address(address)
        if not record.is_linked:
            raise NotEligibleError(
                "Account is not linked to a game account",
                code=ServiceErrorCode.ACCOUNT_NOT_LINKED,
                details={"address": address},
            )

        tier = record.web_app_tier or WebAppTier.NEWCOMER
        res_allowance, owned_res, owned_xres, nfts_owned = await asyncio.gather(
            self.ledger.allowance(Currency.XRES, address),
            self.ledger.balance_of(Currency.XRES, address),
            self.playfab.get_currency_balance(record.playfab_id, Currency.XRES),
            self.tier_service.get_nfts_owned(address),
        )

        return WebAppOverview(
            address=address,
            res_allowance=res_allowance,
            owned_xres=owned_xres,
            owned_res=owned_res,
            transactions=CurrencyTransactions(
                total_xres_claimed=record.total_xres_claimed,
                total_xrec_claimed=record.total_xrec_claimed,
                total_res_deposited=record.total_res_deposited,
                total_rec_deposited=record.total_rec_deposited,
            ),
            claim_cooldown=await self.get_claim_cooldown(address),
            web_app_tier=tier,
            nfts_owned=nfts_owned,
            claiming_info=get_claiming_fee_and_limits(tier),
            web_app_tier_benefits=get_tier_benefits(tier),
        )
