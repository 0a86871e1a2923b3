import pytest

from backend.errors import ValidationFailure
from backend.task_state import NodeState, advance, parse_state, state_breakdown, state_rank


def test_single_step_follows_cycle():
    assert advance('red', 1) is NodeState.YELLOW
    assert advance('yellow', 1) is NodeState.GREEN
    assert advance('green', 1) is NodeState.RED


def test_single_step_is_a_bijection():
    results = {advance(state, 1) for state in NodeState}
    assert results == set(NodeState)


@pytest.mark.parametrize('state', list(NodeState))
def test_double_step_equals_two_single_steps(state):
    assert advance(state, 2) == advance(advance(state, 1), 1)


def test_double_step_goes_back_one_position():
    assert advance(NodeState.RED, 2) is NodeState.GREEN
    assert advance(NodeState.GREEN, 2) is NodeState.YELLOW


def test_advance_rejects_other_step_counts():
    with pytest.raises(ValidationFailure):
        advance('red', 3)


def test_parse_state_rejects_fourth_state():
    assert parse_state(None) is NodeState.RED
    assert parse_state('GREEN') is NodeState.GREEN
    with pytest.raises(ValidationFailure):
        parse_state('blue')


def test_state_rank_orders_red_yellow_green():
    assert state_rank('red') < state_rank('yellow') < state_rank('green')


def test_breakdown_counts_and_progress():
    nodes = [{'state': 'red'}, {'state': 'yellow'}, {'state': 'green'}, {'state': 'green'}]
    breakdown = state_breakdown(nodes)
    assert breakdown['total'] == 4
    assert breakdown['counts'] == {'red': 1, 'yellow': 1, 'green': 2}
    assert breakdown['percentages']['green'] == 50.0
    assert breakdown['progress'] == 62


def test_breakdown_of_empty_list():
    breakdown = state_breakdown([])
    assert breakdown['total'] == 0
    assert breakdown['progress'] == 0
