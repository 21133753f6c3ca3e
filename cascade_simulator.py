"""
Contagion engine for interbank default cascades.

Simulates how one bankruptcy propagates through funding shocks, credit
shocks and panic withdrawals, round by round, until no new bank defaults.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from bank import Bank, BankGraph
from shock_model import (
    Coefficients,
    DefaultRule,
    credit_shock_amount,
    funding_shock_amount,
    is_defaulting,
    withdrawal_amount,
)

logger = logging.getLogger(__name__)


class ShockType(Enum):
    """Kinds of events recorded during a cascade."""
    DEFAULTED = "defaulted"
    FUNDING_SHOCK = "funding_shock"
    CREDIT_SHOCK = "credit_shock"
    PANIC_WITHDRAWAL = "panic_withdrawal"


@dataclass(frozen=True)
class ShockEvent:
    """
    One entry of the cascade audit trail.

    For DEFAULTED only `source` is set. For shocks and withdrawals `source`
    and `target` follow the (from, to) convention of the event kind:
    FUNDING_SHOCK(defaulted bank, shocked bank),
    CREDIT_SHOCK(shocked bank, defaulted bank),
    PANIC_WITHDRAWAL(withdrawing bank, withdrawn-from bank).
    """
    kind: ShockType
    source: str
    target: Optional[str] = None
    amount: float = 0.0
    round_number: int = 0
    trigger: Optional[str] = None

    def describe(self) -> str:
        """Human-readable narration of the event."""
        if self.kind is ShockType.DEFAULTED:
            return f"Bank {self.source} defaulted"
        if self.kind is ShockType.FUNDING_SHOCK:
            return (f"Funding shock from the default of bank {self.source}: "
                    f"bank {self.target} lost {self.amount:.2f}")
        if self.kind is ShockType.CREDIT_SHOCK:
            return (f"Credit shock from the default of bank {self.target}: "
                    f"bank {self.source} lost {self.amount:.2f}")
        return (f"Bank run: bank {self.source} withdraws {self.amount:.2f} of its deposit "
                f"from bank {self.target} after the default of bank {self.trigger}")


class CascadeReplay:
    """
    Restartable, ordered view over a finished cascade.

    Iterating yields events; `frames()` also rebuilds the network state after
    each event, starting from the snapshot taken before the cascade ran.
    """

    def __init__(self, initial: BankGraph, events: List[ShockEvent]):
        self._initial = initial.clone()
        self._events = list(events)

    def __iter__(self) -> Iterator[ShockEvent]:
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __getitem__(self, index):
        return self._events[index]

    def frames(self) -> Iterator[Tuple[ShockEvent, BankGraph]]:
        """
        Yield (event, snapshot) pairs.

        Each snapshot is an independent copy, safe to keep or mutate.
        """
        state = self._initial.clone()
        for event in self._events:
            _apply_event(state, event)
            yield event, state.clone()

    def initial_state(self) -> BankGraph:
        """Network state before the first event."""
        return self._initial.clone()

    def final_state(self) -> BankGraph:
        state = self._initial.clone()
        for event in self._events:
            _apply_event(state, event)
        return state


def _apply_event(state: BankGraph, event: ShockEvent) -> None:
    if event.kind is ShockType.DEFAULTED:
        state[event.source].mark_bankrupt()
    elif event.kind is ShockType.FUNDING_SHOCK:
        state[event.target].debit(event.amount)
    elif event.kind is ShockType.CREDIT_SHOCK:
        state[event.source].debit(event.amount)
    else:
        state[event.target].debit(event.amount)
        state[event.source].credit(event.amount)


class ContagionEngine:
    """
    Runs one default cascade over a BankGraph.

    Each round processes the frontier (banks that defaulted in the previous
    round): panic withdrawals first, then funding shocks, then credit shocks.
    New defaults are only detected by a full scan at the end of the round,
    so within a round every shock sees the same set of bankrupt banks.
    """

    def __init__(
        self,
        graph: BankGraph,
        coefficients: Coefficients,
        default_rule: DefaultRule = DefaultRule.NEGATIVE,
        exclude_in_round_defaults: bool = False
    ):
        """
        Initialize the engine.

        Args:
            graph: Network to run on (mutated in place)
            coefficients: Shock parameters, fixed for the whole cascade
            default_rule: Balance threshold convention (default: balance < 0)
            exclude_in_round_defaults: Skip banks whose balance already met the
                default rule earlier in the same round (default: False)
        """
        self.graph = graph
        self.coefficients = coefficients
        self.default_rule = default_rule
        self.exclude_in_round_defaults = exclude_in_round_defaults

        self._initial = graph.clone()
        self.events: List[ShockEvent] = []
        self.frontiers: List[List[str]] = []
        self._round = 0
        self._finished = False

    @property
    def rounds(self) -> int:
        """Number of propagation rounds processed so far."""
        return len(self.frontiers)

    def _emit(self, event: ShockEvent) -> None:
        self.events.append(event)
        logger.debug("round %d: %s", event.round_number, event.describe())

    def _eligible(self, bank: Bank) -> bool:
        if not bank.is_solvent():
            return False
        if self.exclude_in_round_defaults and is_defaulting(bank.balance, self.default_rule):
            return False
        return True

    def declare_default(self, bank_id: str) -> bool:
        """
        Mark a bank bankrupt and record the default.

        Declaring an already bankrupt bank changes nothing and records nothing.

        Returns:
            True if the bank was newly declared bankrupt

        Raises:
            UnknownBankId: If the id is not in the graph
        """
        bank = self.graph.bank(bank_id)
        if not bank.mark_bankrupt():
            logger.debug("bank %s already bankrupt, ignoring default", bank_id)
            return False
        self._emit(ShockEvent(ShockType.DEFAULTED, bank_id, round_number=self._round))
        return True

    def panic_withdrawal(self, defaulted_id: str) -> None:
        """
        Simulate a bank run on the partners of a defaulted bank.

        Every solvent bank holding an exposure to a solvent partner pulls
        `panic_rate` of that exposure back. The transfer is zero-sum.
        """
        if not self.coefficients.panic_enabled:
            return

        partners = dict.fromkeys(
            self.graph.creditors_of(defaulted_id) + self.graph.debtors_of(defaulted_id)
        )
        for partner_id in partners:
            partner = self.graph[partner_id]
            if not self._eligible(partner):
                continue
            for depositor in self.graph:
                if depositor is partner or partner_id not in depositor.exposures:
                    continue
                if not self._eligible(depositor):
                    continue
                amount = withdrawal_amount(depositor.exposures[partner_id], self.coefficients.panic_rate)
                partner.debit(amount)
                depositor.credit(amount)
                self._emit(ShockEvent(
                    ShockType.PANIC_WITHDRAWAL, depositor.bank_id, partner_id,
                    amount, self._round, trigger=defaulted_id
                ))

    def _funding_shocks(self, defaulted_id: str) -> None:
        defaulted = self.graph[defaulted_id]
        for partner_id, exposure in defaulted.exposures.items():
            partner = self.graph[partner_id]
            if not self._eligible(partner):
                continue
            amount = funding_shock_amount(exposure, self.coefficients.lambda_f)
            partner.debit(amount)
            self._emit(ShockEvent(ShockType.FUNDING_SHOCK, defaulted_id, partner_id, amount, self._round))

    def _credit_shocks(self, defaulted_id: str) -> None:
        for bank in self.graph:
            if defaulted_id not in bank.exposures or not self._eligible(bank):
                continue
            amount = credit_shock_amount(bank.exposures[defaulted_id], self.coefficients.lambda_c)
            bank.debit(amount)
            self._emit(ShockEvent(ShockType.CREDIT_SHOCK, bank.bank_id, defaulted_id, amount, self._round))

    def _scan_defaults(self) -> List[str]:
        new_defaults = []
        for bank in self.graph:
            if bank.is_solvent() and is_defaulting(bank.balance, self.default_rule):
                self.declare_default(bank.bank_id)
                new_defaults.append(bank.bank_id)
        return new_defaults

    def run_cascade(self, initial_id: str, max_rounds: Optional[int] = None) -> List[ShockEvent]:
        """
        Propagate the default of `initial_id` until the network is stable.

        Args:
            initial_id: Bank whose default starts the cascade
            max_rounds: Optional cap on propagation rounds. The cascade always
                ends within len(graph) rounds without it.

        Returns:
            The ordered event log

        Raises:
            UnknownBankId: If the id is not in the graph
            RuntimeError: If this engine already ran a cascade
        """
        if self._finished:
            raise RuntimeError("ContagionEngine runs a single cascade; build a new engine")
        self.graph.bank(initial_id)

        self.declare_default(initial_id)
        frontier = [initial_id]

        while frontier:
            if max_rounds is not None and self.rounds >= max_rounds:
                logger.warning("cascade stopped after %d rounds with %d banks pending",
                               self.rounds, len(frontier))
                break

            self._round += 1
            self.frontiers.append(frontier)

            for bank_id in frontier:
                self.panic_withdrawal(bank_id)
            for bank_id in frontier:
                self._funding_shocks(bank_id)
            for bank_id in frontier:
                self._credit_shocks(bank_id)

            frontier = self._scan_defaults()
            logger.info("round %d: %d new defaults, %d bankrupt in total",
                        self._round, len(frontier), self.graph.bankrupt_count())

        self._finished = True
        return self.events

    def replay(self) -> CascadeReplay:
        """Replayable view over the events recorded so far."""
        return CascadeReplay(self._initial, self.events)

    def get_systemic_fragility(self) -> float:
        """
        Share of banks bankrupt (0-1).

        Returns:
            Fragility score
        """
        total_banks = len(self.graph)
        if total_banks == 0:
            return 0.0
        return self.graph.bankrupt_count() / total_banks
