"""
asset_ledger.py - In-Memory Asset Transfer Service

The AssetLedger is a reference implementation of the AssetTransfer
collaborator: a double-entry balance book for fungible assets with
ERC20-style allowances granted to the loan operator.

Key responsibilities:
    - Implements the AssetTransfer protocol (transfer_from, transfer_batch)
    - Applies batches atomically (all moves succeed or none do)
    - Never lets a non-system balance go negative
    - Logs every applied batch with a monotonic sequence number
"""

from __future__ import annotations
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .core import (
    Move, BalanceMap, SYSTEM_WALLET,
    LoanLedgerError, InsufficientAllowance, InsufficientBalance,
    WalletNotRegistered, AssetNotRegistered,
    check_uint256,
)


@dataclass(frozen=True, slots=True)
class TransferBatch:
    """An applied, immutable group of moves."""
    moves: Tuple[Move, ...]
    sequence_number: int

    def __repr__(self) -> str:
        return f"TransferBatch(#{self.sequence_number}, {len(self.moves)} moves)"


class AssetLedger:
    """
    Balance book with all-or-nothing transfers.

    The system wallet is registered automatically, is exempt from balance
    checks, and is the source of issuance.

    Thread Safety:
        Not thread-safe. Each thread should maintain its own AssetLedger.

    Example:
        assets = AssetLedger("main")
        assets.register_asset("DAI")
        assets.register_wallet("alice")
        assets.register_wallet("bob")
        assets.issue("alice", "DAI", 1000)
        assets.approve("alice", "DAI", 1000)
        assets.transfer_from("DAI", "alice", "bob", 100)
    """

    def __init__(
        self,
        name: str = "assets",
        verbose: bool = True,
        test_mode: bool = False,
        require_allowance: bool = True,
    ):
        """
        Create an asset ledger.

        Args:
            name: Ledger identifier
            verbose: Print applied and rejected transfers (default: True)
            test_mode: Allow set_balance() calls (default: False)
            require_allowance: Debit allowance on transfer_from (default: True)
        """
        self.name = name
        self.verbose = verbose
        self.require_allowance = require_allowance
        self._test_mode = test_mode
        self.assets: Set[str] = set()
        self.registered_wallets: Set[str] = set()
        self.balances: Dict[str, Dict[str, int]] = {}
        self.allowances: Dict[Tuple[str, str], int] = {}
        self.transaction_log: List[TransferBatch] = []
        self._next_sequence: int = 0

        self.registered_wallets.add(SYSTEM_WALLET)
        self.balances[SYSTEM_WALLET] = defaultdict(int)

    # ========================================================================
    # READ-ONLY
    # ========================================================================

    def get_balance(self, wallet_id: str, asset: str) -> int:
        self._require_wallet(wallet_id)
        self._require_asset(asset)
        return self.balances[wallet_id].get(asset, 0)

    def get_wallet_balances(self, wallet_id: str) -> BalanceMap:
        self._require_wallet(wallet_id)
        return dict(self.balances[wallet_id])

    def allowance(self, owner: str, asset: str) -> int:
        """Amount owner has approved the operator to move."""
        return self.allowances.get((owner, asset), 0)

    def total_supply(self, asset: str) -> int:
        """Sum of all balances, system wallet included (always zero)."""
        self._require_asset(asset)
        return sum(self.balances[w].get(asset, 0) for w in sorted(self.registered_wallets))

    def is_registered(self, wallet_id: str) -> bool:
        return wallet_id in self.registered_wallets

    def _require_wallet(self, wallet_id: str) -> None:
        if wallet_id not in self.registered_wallets:
            raise WalletNotRegistered(f"Wallet {wallet_id} not registered")

    def _require_asset(self, asset: str) -> None:
        if asset not in self.assets:
            raise AssetNotRegistered(f"Asset {asset} not registered")

    # ========================================================================
    # REGISTRATION (Mutating)
    # ========================================================================

    def register_wallet(self, wallet_id: str) -> str:
        if wallet_id in self.registered_wallets:
            raise ValueError(f"Wallet {wallet_id} already registered")
        self.registered_wallets.add(wallet_id)
        self.balances[wallet_id] = defaultdict(int)
        return wallet_id

    def register_asset(self, asset: str) -> None:
        if asset in self.assets:
            raise ValueError(f"Asset {asset} already registered")
        self.assets.add(asset)
        if self.verbose:
            print(f"📝 Registered asset: {asset}")

    def approve(self, owner: str, asset: str, amount: int) -> None:
        """Set the amount of asset the operator may move out of owner."""
        self._require_wallet(owner)
        self._require_asset(asset)
        self.allowances[(owner, asset)] = check_uint256(amount, "allowance")

    def set_balance(self, wallet_id: str, asset: str, amount: int) -> None:
        """
        Overwrite a balance directly.

        WARNING: bypasses double-entry accounting; only available in test mode.

        Raises:
            LoanLedgerError: If called when test_mode is False
        """
        if not self._test_mode:
            raise LoanLedgerError(
                "set_balance() is disabled in production mode. "
                "Use issue() or transfers to modify balances. "
                "Set test_mode=True when creating AssetLedger for testing."
            )
        self._require_wallet(wallet_id)
        self._require_asset(asset)
        self.balances[wallet_id][asset] = check_uint256(amount, "balance")

    # ========================================================================
    # TRANSFERS (Mutating)
    # ========================================================================

    def issue(self, wallet_id: str, asset: str, amount: int) -> TransferBatch:
        """Create amount of asset in wallet_id, debiting the system wallet."""
        move = Move(amount, asset, SYSTEM_WALLET, wallet_id, f"issue_{asset}")
        return self._apply([move], consume_allowance=False)

    def transfer_from(self, asset: str, source: str, dest: str, amount: int) -> TransferBatch:
        """Move amount of asset from source to dest on the operator's behalf."""
        return self.transfer_batch([Move(amount, asset, source, dest, f"transfer_{asset}")])

    def transfer_batch(self, moves: Sequence[Move]) -> TransferBatch:
        """
        Apply moves atomically, debiting allowances.

        Raises:
            WalletNotRegistered, AssetNotRegistered, InsufficientBalance,
            InsufficientAllowance: nothing is applied
        """
        return self._apply(list(moves), consume_allowance=self.require_allowance)

    def _apply(self, moves: List[Move], consume_allowance: bool) -> TransferBatch:
        try:
            allowance_deltas = self._validate(moves, consume_allowance)
        except LoanLedgerError as e:
            if self.verbose:
                print(f"✗ REJECTED: {e}")
            raise

        for move in moves:
            self.balances[move.source][move.asset] -= move.amount
            self.balances[move.dest][move.asset] += move.amount
        for key, spent in allowance_deltas.items():
            self.allowances[key] -= spent

        batch = TransferBatch(moves=tuple(moves), sequence_number=self._next_sequence)
        self._next_sequence += 1
        self.transaction_log.append(batch)

        if self.verbose:
            for move in moves:
                print(f"✓ APPLIED: {move!r} [{move.memo}]")
        return batch

    def _validate(
        self,
        moves: List[Move],
        consume_allowance: bool,
    ) -> Dict[Tuple[str, str], int]:
        """
        Check every move against registration, balances and allowances.

        Returns:
            Allowance to debit per (owner, asset)
        """
        for move in moves:
            self._require_asset(move.asset)
            self._require_wallet(move.source)
            self._require_wallet(move.dest)

        net: Dict[Tuple[str, str], int] = defaultdict(int)
        spent: Dict[Tuple[str, str], int] = defaultdict(int)
        for move in moves:
            net[(move.source, move.asset)] -= move.amount
            net[(move.dest, move.asset)] += move.amount
            if consume_allowance and move.source != SYSTEM_WALLET:
                spent[(move.source, move.asset)] += move.amount

        # SYSTEM_WALLET is exempt - it can go negative through issuance
        for (wallet, asset), delta in net.items():
            if wallet == SYSTEM_WALLET:
                continue
            proposed = self.balances[wallet].get(asset, 0) + delta
            if proposed < 0:
                raise InsufficientBalance(
                    f"{wallet} {asset}: balance {self.balances[wallet].get(asset, 0)} "
                    f"short by {-proposed}"
                )

        for (owner, asset), amount in spent.items():
            approved = self.allowance(owner, asset)
            if approved < amount:
                raise InsufficientAllowance(
                    f"{owner} {asset}: allowance {approved} < {amount}"
                )

        return dict(spent)

    def __repr__(self) -> str:
        return (
            f"AssetLedger({self.name!r}, {len(self.assets)} assets, "
            f"{len(self.registered_wallets)} wallets)"
        )
