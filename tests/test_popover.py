from mortgasim.calculations.chart_interaction import MAX_OVERPAYMENT_AMOUNT, OverpaymentPopover
from mortgasim.calculations.overpayments import OverpaymentStore


def _add_popover() -> tuple[OverpaymentPopover, OverpaymentStore]:
    store = OverpaymentStore('2025-01-01')
    return OverpaymentPopover(store, 12), store


def test_negative_amount_error() -> None:
    popover, store = _add_popover()
    popover.set_input('-5')
    assert popover.error == 'Amount must be positive'
    assert popover.can_confirm is False
    assert popover.confirm() is None
    assert popover.error == 'Amount must be positive'
    assert len(store) == 0


def test_amount_above_ceiling_error() -> None:
    popover, _ = _add_popover()
    popover.set_input(str(MAX_OVERPAYMENT_AMOUNT + 1))
    assert popover.error == 'Amount too large'
    assert popover.can_confirm is False


def test_blank_or_non_numeric_input_blocks_confirm() -> None:
    popover, store = _add_popover()
    popover.set_input('abc')
    assert popover.error is None
    assert popover.amount == 0.0
    assert popover.confirm() is None
    assert popover.error == 'Please enter a valid amount'

    popover.set_input('')
    assert popover.error is None
    assert popover.is_open
    assert len(store) == 0


def test_valid_amount_confirms_and_closes() -> None:
    popover, store = _add_popover()
    popover.set_input('1e3')
    assert popover.can_confirm
    marker = popover.confirm()
    assert marker.period_index == 12
    assert marker.amount == 1000.0
    assert popover.is_open is False
    assert popover.can_confirm is False


def test_add_popover_has_no_delete() -> None:
    popover, _ = _add_popover()
    assert popover.delete() is False
    assert popover.is_open
