"""
In-memory token collaborators.

`Erc20Token` is a plain fungible token with allowances, used for the
collateral asset. `DebtToken` adds owner-restricted `mint`/`burn` and is
the dollar-pegged unit issued by the engine.

Failure conventions follow the token standard the engine is written against:
- missing balance or allowance makes `transfer`/`transfer_from` return False,
- misuse of the issuer (wrong caller, zero address, bad amount) raises `TokenError`.
"""

from __future__ import annotations

import logging
from typing import Dict, Tuple

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x" + "00" * 20


class TokenError(Exception):
    """Raised on issuer misuse. `code` names the failed precondition."""

    def __init__(self, code: str, message: str = "") -> None:
        self.code = code
        super().__init__(f"{code}: {message}" if message else code)


class Erc20Token:
    """
    Fungible token with balances and allowances.

    Note: balances are kept in a plain dict; zero balances are dropped.
    """

    def __init__(self, name: str, symbol: str, address: str, decimals: int = 18):
        self.name = name
        self.symbol = symbol
        self.address = address
        self._decimals = decimals
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self._total_supply = 0

    def decimals(self) -> int:
        return self._decimals

    def balance_of(self, owner: str) -> int:
        return self._balances.get(owner, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def total_supply(self) -> int:
        return self._total_supply

    def approve(self, spender: str, amount: int, *, caller: str) -> bool:
        if amount < 0:
            raise TokenError("InvalidAmount", f"allowance cannot be negative: {amount}")
        if amount == 0:
            self._allowances.pop((caller, spender), None)
        else:
            self._allowances[(caller, spender)] = amount
        return True

    def transfer(self, to: str, amount: int, *, caller: str) -> bool:
        return self._move(caller, to, amount)

    def transfer_from(self, owner: str, to: str, amount: int, *, caller: str) -> bool:
        allowed = self.allowance(owner, caller)
        if amount > allowed:
            logger.debug(
                "transfer_from refused: allowance %s < %s (%s -> %s)", allowed, amount, owner, caller
            )
            return False
        if not self._move(owner, to, amount):
            return False
        self.approve(caller, allowed - amount, caller=owner)
        return True

    def mint_to(self, to: str, amount: int) -> None:
        """Faucet: create `amount` tokens for `to` (collateral mocks and tests only)."""
        if amount <= 0:
            raise TokenError("MustBeMoreThanZero")
        self._credit(to, amount)
        self._total_supply += amount

    def _move(self, src: str, dst: str, amount: int) -> bool:
        if amount < 0:
            return False
        current = self.balance_of(src)
        if amount > current:
            logger.debug("transfer refused: balance %s < %s (%s)", current, amount, src)
            return False
        self._debit(src, amount)
        self._credit(dst, amount)
        return True

    def _credit(self, owner: str, amount: int) -> None:
        new_balance = self.balance_of(owner) + amount
        if new_balance == 0:
            self._balances.pop(owner, None)
        else:
            self._balances[owner] = new_balance

    def _debit(self, owner: str, amount: int) -> None:
        new_balance = self.balance_of(owner) - amount
        if new_balance < 0:
            raise TokenError("InsufficientBalance", f"{owner}: {new_balance}")
        if new_balance == 0:
            self._balances.pop(owner, None)
        else:
            self._balances[owner] = new_balance

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.symbol}@{self.address}, supply={self._total_supply})"


class DebtToken(Erc20Token):
    """Dollar-pegged debt token; only `owner` may mint or burn."""

    def __init__(self, name: str, symbol: str, address: str, owner: str):
        super().__init__(name, symbol, address, decimals=18)
        self.owner = owner

    def _require_owner(self, caller: str) -> None:
        if caller != self.owner:
            raise TokenError("NotOwner", f"{caller} is not {self.owner}")

    def transfer_ownership(self, new_owner: str, *, caller: str) -> None:
        self._require_owner(caller)
        if new_owner == ZERO_ADDRESS:
            raise TokenError("NotZeroAddress")
        logger.info("debt token %s ownership: %s -> %s", self.symbol, self.owner, new_owner)
        self.owner = new_owner

    def mint(self, to: str, amount: int, *, caller: str) -> bool:
        self._require_owner(caller)
        if to == ZERO_ADDRESS:
            raise TokenError("NotZeroAddress")
        if amount <= 0:
            raise TokenError("MustBeMoreThanZero")
        self._credit(to, amount)
        self._total_supply += amount
        return True

    def burn(self, amount: int, *, caller: str) -> None:
        """Burn from the caller's own balance."""
        self._require_owner(caller)
        if amount <= 0:
            raise TokenError("MustBeMoreThanZero")
        if self.balance_of(caller) < amount:
            raise TokenError("BurnAmountExceedsBalance", f"{self.balance_of(caller)} < {amount}")
        self._debit(caller, amount)
        self._total_supply -= amount
