"""
Bank and BankGraph classes for interbank contagion simulation.
"""

from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union


class InvalidGraph(ValueError):
    """Raised when a bank network violates its consistency invariants."""


class UnknownBankId(KeyError):
    """Raised when a bank id is not part of the network."""


class Bank:
    """
    Represents a single bank (node) in the interbank network.

    Attributes:
        bank_id (str): Unique identifier for the bank
        balance (float): Current balance, may go negative before default
        exposures (Dict[str, float]): Counterparty id -> amount this bank
            has extended to that counterparty
        bankrupt (bool): Default flag, never reset once set
    """

    def __init__(
        self,
        bank_id: str,
        balance: float,
        exposures: Optional[Mapping[str, float]] = None,
        bankrupt: bool = False
    ):
        """
        Initialize a Bank instance.

        Args:
            bank_id: Unique identifier
            balance: Initial balance
            exposures: Counterparty id -> exposure amount (default: none)
            bankrupt: Initial default flag (default: False)

        Raises:
            ValueError: If any exposure amount is negative
        """
        exposures = dict(exposures or {})
        for target, amount in exposures.items():
            if amount < 0:
                raise ValueError(
                    f"Exposure of {bank_id} to {target} must be non-negative, got {amount}"
                )

        self.bank_id = bank_id
        self.balance = float(balance)
        self.exposures: Dict[str, float] = {t: float(a) for t, a in exposures.items()}
        self._is_bankrupt = bool(bankrupt)

    @property
    def bankrupt(self) -> bool:
        return self._is_bankrupt

    def is_solvent(self) -> bool:
        """Check if the bank has not been declared bankrupt."""
        return not self._is_bankrupt

    def mark_bankrupt(self) -> bool:
        """
        Mark the bank as bankrupt.

        Returns:
            True if the flag changed, False if the bank was already bankrupt
        """
        if self._is_bankrupt:
            return False
        self._is_bankrupt = True
        return True

    def debit(self, amount: float) -> None:
        """Remove amount from the balance."""
        self.balance -= amount

    def credit(self, amount: float) -> None:
        """Add amount to the balance."""
        self.balance += amount

    def total_exposure(self) -> float:
        """Sum of everything this bank has extended to its counterparties."""
        return sum(self.exposures.values())

    def copy(self) -> "Bank":
        """Return an independent copy (exposure map copied by value)."""
        return Bank(
            bank_id=self.bank_id,
            balance=self.balance,
            exposures=dict(self.exposures),
            bankrupt=self._is_bankrupt
        )

    def get_balance_sheet(self) -> Dict[str, object]:
        """
        Get a snapshot of the bank's state.

        Returns:
            Dictionary containing id, balance, exposures and default flag
        """
        return {
            'bank_id': self.bank_id,
            'balance': self.balance,
            'exposures': dict(self.exposures),
            'total_exposure': self.total_exposure(),
            'bankrupt': self._is_bankrupt
        }

    def __repr__(self) -> str:
        return (f"Bank(id={self.bank_id}, balance={self.balance:.2f}, "
                f"exposures={len(self.exposures)}, bankrupt={self._is_bankrupt})")


class BankGraph:
    """
    A fixed set of named banks and their directed exposure relationships.

    The id set is fixed at construction. Every exposure must point at a bank
    in the graph and no bank may hold an exposure to itself. Iteration
    follows insertion order.
    """

    def __init__(self, banks: Union[Iterable[Bank], Mapping[str, Bank]]):
        """
        Initialize the graph.

        Args:
            banks: Bank objects, either as an iterable or a mapping id -> Bank

        Raises:
            InvalidGraph: On duplicate ids, dangling exposures or self exposures
        """
        if isinstance(banks, Mapping):
            for key, bank in banks.items():
                if key != bank.bank_id:
                    raise InvalidGraph(f"Key {key!r} does not match bank id {bank.bank_id!r}")
            banks = banks.values()

        self._banks: Dict[str, Bank] = {}
        for bank in banks:
            if bank.bank_id in self._banks:
                raise InvalidGraph(f"Duplicate bank id {bank.bank_id!r}")
            self._banks[bank.bank_id] = bank

        self._validate()

    @classmethod
    def from_dict(cls, data: Mapping[str, Tuple[float, Mapping[str, float]]]) -> "BankGraph":
        """
        Build a graph from plain literals.

        Args:
            data: bank id -> (balance, {counterparty id: exposure})

        Returns:
            BankGraph
        """
        try:
            banks = [Bank(bank_id, balance, exposures) for bank_id, (balance, exposures) in data.items()]
        except ValueError as exc:
            raise InvalidGraph(str(exc)) from exc
        return cls(banks)

    def _validate(self) -> None:
        for bank_id, bank in self._banks.items():
            for target, amount in bank.exposures.items():
                if target == bank_id:
                    raise InvalidGraph(f"Bank {bank_id!r} holds an exposure to itself")
                if target not in self._banks:
                    raise InvalidGraph(f"Bank {bank_id!r} has an exposure to unknown bank {target!r}")
                if amount < 0:
                    raise InvalidGraph(f"Negative exposure {bank_id!r} -> {target!r}: {amount}")

    def bank(self, bank_id: str) -> Bank:
        """
        Look up a bank.

        Raises:
            UnknownBankId: If the id is not in the graph
        """
        try:
            return self._banks[bank_id]
        except KeyError:
            raise UnknownBankId(bank_id) from None

    __getitem__ = bank

    def __contains__(self, bank_id: object) -> bool:
        return bank_id in self._banks

    def __iter__(self) -> Iterator[Bank]:
        return iter(self._banks.values())

    def __len__(self) -> int:
        return len(self._banks)

    def ids(self) -> List[str]:
        return list(self._banks)

    def banks(self) -> List[Bank]:
        return list(self._banks.values())

    def exposures_of(self, bank_id: str) -> Dict[str, float]:
        """Exposures held by bank_id (its debtors), as a copy."""
        return dict(self.bank(bank_id).exposures)

    def debtors_of(self, bank_id: str) -> List[str]:
        """Banks that bank_id has extended funding to."""
        return list(self.bank(bank_id).exposures)

    def creditors_of(self, bank_id: str) -> List[str]:
        """Banks holding an exposure to bank_id, in graph order."""
        self.bank(bank_id)
        return [b.bank_id for b in self._banks.values() if bank_id in b.exposures]

    def bankrupt_ids(self) -> List[str]:
        return [b.bank_id for b in self._banks.values() if b.bankrupt]

    def bankrupt_count(self) -> int:
        return sum(1 for b in self._banks.values() if b.bankrupt)

    def total_balance(self) -> float:
        return sum(b.balance for b in self._banks.values())

    def clone(self) -> "BankGraph":
        """
        Deep copy the graph.

        Balances, bankruptcy flags and exposure maps are copied by value so
        the clone shares no mutable state with the source.
        """
        return BankGraph(b.copy() for b in self._banks.values())

    def get_state(self) -> Dict[str, Dict[str, object]]:
        """Snapshot of every bank's balance sheet, keyed by id."""
        return {bank_id: b.get_balance_sheet() for bank_id, b in self._banks.items()}

    def __repr__(self) -> str:
        return f"BankGraph(banks={len(self._banks)}, bankrupt={self.bankrupt_count()})"
