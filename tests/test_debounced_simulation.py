import pytest

from mortgasim.services.debounced_simulation import DebouncedSimulation
from mortgasim.services.mortgage_api import MortgageApiError, MortgageApiValidationError


def test_burst_of_events_sends_only_the_last_request(scheduler) -> None:
    calls: list[tuple[float, dict]] = []

    def simulate(request: dict) -> dict:
        calls.append((scheduler.now, request))
        return {'echo': request['n']}

    sim = DebouncedSimulation(simulate, scheduler, debounce_seconds=0.5)
    sim.debounced_submit({'n': 1})
    scheduler.advance(0.1)
    sim.debounced_submit({'n': 2})
    scheduler.advance(0.1)
    sim.debounced_submit({'n': 3})
    assert sim.is_debouncing
    scheduler.advance(0.49)
    assert calls == []
    scheduler.advance(0.02)
    assert len(calls) == 1
    assert calls[0][0] == pytest.approx(0.7)
    assert calls[0][1] == {'n': 3}
    assert sim.data == {'echo': 3}
    assert sim.is_debouncing is False


def test_cancel_pending_drops_scheduled_call(scheduler) -> None:
    calls: list[dict] = []
    sim = DebouncedSimulation(lambda r: calls.append(r) or {}, scheduler)
    sim.debounced_submit({'n': 1})
    sim.cancel_pending()
    scheduler.advance(2.0)
    assert calls == []


def test_submit_is_immediate_and_cancels_pending(scheduler) -> None:
    calls: list[dict] = []

    def simulate(request: dict) -> dict:
        calls.append(request)
        return {'ok': request['n']}

    sim = DebouncedSimulation(simulate, scheduler)
    sim.debounced_submit({'n': 1})
    assert sim.submit({'n': 2}) == {'ok': 2}
    scheduler.advance(1.0)
    assert calls == [{'n': 2}]
    assert sim.last_request == {'n': 2}


def test_error_keeps_previous_results(scheduler) -> None:
    responses = iter([{'v': 1}, MortgageApiValidationError('Validation Error: mortgage.amount: too small', 422)])
    errors: list[Exception] = []

    def simulate(request: dict) -> dict:
        item = next(responses)
        if isinstance(item, Exception):
            raise item
        return item

    sim = DebouncedSimulation(simulate, scheduler, on_error=errors.append)
    sim.submit({'n': 1})
    assert sim.submit({'n': 2}) is None
    assert sim.data == {'v': 1}
    assert str(sim.error) == 'Validation Error: mortgage.amount: too small'
    assert errors == [sim.error]
    assert sim.is_pending is False


def test_success_clears_error(scheduler) -> None:
    responses = iter([MortgageApiError('down'), {'v': 2}])

    def simulate(request: dict) -> dict:
        item = next(responses)
        if isinstance(item, Exception):
            raise item
        return item

    seen: list[dict] = []
    sim = DebouncedSimulation(simulate, scheduler, on_success=seen.append)
    sim.submit({'n': 1})
    assert sim.error is not None
    sim.submit({'n': 2})
    assert sim.error is None
    assert seen == [{'v': 2}]


def test_late_response_from_superseded_request_is_discarded(scheduler) -> None:
    holder: dict = {}

    def simulate(request: dict) -> dict:
        # The first request only returns after a newer one has completed.
        if request['n'] == 1:
            holder['sim'].submit({'n': 2})
        return {'result': request['n']}

    sim = DebouncedSimulation(simulate, scheduler)
    holder['sim'] = sim
    assert sim.submit({'n': 1}) is None
    assert sim.data == {'result': 2}


def test_non_api_errors_propagate(scheduler) -> None:
    def simulate(request: dict) -> dict:
        raise KeyError('boom')

    sim = DebouncedSimulation(simulate, scheduler)
    with pytest.raises(KeyError):
        sim.submit({'n': 1})
    assert sim.is_pending is False
