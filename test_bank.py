"""
Unit tests for Bank and BankGraph classes.
"""

import pytest
from bank import Bank, BankGraph, InvalidGraph, UnknownBankId


@pytest.fixture
def triangle():
    """Three banks, exposures 1 -> 2 -> 3 -> 1 plus 1 -> 3."""
    return BankGraph.from_dict({
        "1": (1000, {"2": 500, "3": 250}),
        "2": (1500, {"3": 800}),
        "3": (2000, {"1": 300}),
    })


class TestBank:
    """Test suite for Bank class."""

    def test_bank_initialization(self):
        """Test basic bank initialization."""
        bank = Bank("A", balance=1000, exposures={"B": 250})

        assert bank.bank_id == "A"
        assert bank.balance == 1000
        assert bank.exposures == {"B": 250}
        assert bank.total_exposure() == 250
        assert bank.is_solvent()
        assert not bank.bankrupt

    def test_negative_exposure_raises_error(self):
        """Test that negative exposures raise ValueError."""
        with pytest.raises(ValueError):
            Bank("A", balance=1000, exposures={"B": -1})

    def test_zero_exposure_allowed(self):
        bank = Bank("A", balance=1000, exposures={"B": 0})
        assert bank.exposures["B"] == 0

    def test_debit_and_credit(self):
        """Balances may go negative without flipping the bankrupt flag."""
        bank = Bank("A", balance=100)
        bank.debit(250)
        assert bank.balance == -150
        assert bank.is_solvent()

        bank.credit(50)
        assert bank.balance == -100

    def test_mark_bankrupt_is_monotonic(self):
        bank = Bank("A", balance=100)

        assert bank.mark_bankrupt() is True
        assert bank.mark_bankrupt() is False
        assert bank.bankrupt
        assert not bank.is_solvent()

    def test_copy_is_independent(self):
        bank = Bank("A", balance=100, exposures={"B": 10})
        other = bank.copy()

        other.exposures["B"] = 99
        other.debit(50)
        other.mark_bankrupt()

        assert bank.exposures == {"B": 10}
        assert bank.balance == 100
        assert bank.is_solvent()

    def test_get_balance_sheet(self):
        """Test balance sheet snapshot."""
        bank = Bank("A", balance=100, exposures={"B": 10, "C": 30})
        snapshot = bank.get_balance_sheet()

        assert snapshot['bank_id'] == "A"
        assert snapshot['balance'] == 100
        assert snapshot['total_exposure'] == 40
        assert snapshot['bankrupt'] is False


class TestBankGraph:
    """Test suite for BankGraph class."""

    def test_lookup(self, triangle):
        assert len(triangle) == 3
        assert "2" in triangle
        assert "9" not in triangle
        assert triangle.bank("2").balance == 1500
        assert triangle["3"].exposures == {"1": 300}
        assert triangle.ids() == ["1", "2", "3"]

    def test_unknown_id_raises(self, triangle):
        with pytest.raises(UnknownBankId):
            triangle.bank("9")
        with pytest.raises(KeyError):
            triangle["9"]

    def test_neighbourhood_queries(self, triangle):
        assert triangle.debtors_of("1") == ["2", "3"]
        assert triangle.creditors_of("3") == ["1", "2"]
        assert triangle.creditors_of("1") == ["3"]
        assert triangle.exposures_of("2") == {"3": 800}

    def test_dangling_exposure_rejected(self):
        with pytest.raises(InvalidGraph):
            BankGraph.from_dict({"1": (1000, {"2": 10})})

    def test_self_exposure_rejected(self):
        with pytest.raises(InvalidGraph):
            BankGraph.from_dict({"1": (1000, {"1": 10}), "2": (1000, {})})

    def test_negative_exposure_rejected(self):
        with pytest.raises(InvalidGraph):
            BankGraph.from_dict({"1": (1000, {"2": -10}), "2": (1000, {})})

    def test_duplicate_ids_rejected(self):
        with pytest.raises(InvalidGraph):
            BankGraph([Bank("1", 100), Bank("1", 200)])

    def test_mapping_key_mismatch_rejected(self):
        with pytest.raises(InvalidGraph):
            BankGraph({"X": Bank("1", 100)})

    def test_invalid_graph_is_value_error(self):
        with pytest.raises(ValueError):
            BankGraph.from_dict({"1": (1000, {"2": 10})})

    def test_aggregates(self, triangle):
        triangle["2"].mark_bankrupt()

        assert triangle.bankrupt_ids() == ["2"]
        assert triangle.bankrupt_count() == 1
        assert triangle.total_balance() == 4500

    def test_clone_isolation(self, triangle):
        """Mutating a clone never leaks into the source or other clones."""
        first = triangle.clone()
        second = triangle.clone()

        first["1"].debit(5000)
        first["1"].mark_bankrupt()
        first["1"].exposures["2"] = 0

        assert triangle["1"].balance == 1000
        assert triangle["1"].is_solvent()
        assert triangle["1"].exposures == {"2": 500, "3": 250}
        assert second["1"].balance == 1000
        assert second["1"].exposures == {"2": 500, "3": 250}

    def test_get_state(self, triangle):
        state = triangle.get_state()
        assert set(state) == {"1", "2", "3"}
        assert state["1"]['exposures'] == {"2": 500, "3": 250}


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
