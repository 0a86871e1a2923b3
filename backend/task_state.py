"""Tri-state task status: the red -> yellow -> green -> red cycle."""

from enum import Enum

from backend.errors import ValidationFailure


class NodeState(str, Enum):
    RED = 'red'
    YELLOW = 'yellow'
    GREEN = 'green'


CYCLE = (NodeState.RED, NodeState.YELLOW, NodeState.GREEN)
STATE_RANK = {state: idx for idx, state in enumerate(CYCLE)}

# Click advances one step, the contextual (right-click) action skips ahead two.
PRIMARY_STEPS = 1
SECONDARY_STEPS = 2
ALLOWED_STEPS = (PRIMARY_STEPS, SECONDARY_STEPS)


def parse_state(raw, default=NodeState.RED):
    """Coerce a raw value into a NodeState; raises ValidationFailure on anything else."""
    if raw is None or raw == '':
        return default
    if isinstance(raw, NodeState):
        return raw
    try:
        return NodeState(str(raw).strip().lower())
    except ValueError:
        raise ValidationFailure(f"Invalid state '{raw}': expected red, yellow or green")


def advance(state, steps=PRIMARY_STEPS):
    """Move a state forward `steps` positions around the cycle."""
    if steps not in ALLOWED_STEPS:
        raise ValidationFailure('steps must be 1 or 2')
    current = parse_state(state)
    for _ in range(steps):
        current = CYCLE[(CYCLE.index(current) + 1) % len(CYCLE)]
    return current


def state_rank(state):
    """Rank used by the composite sort; unknown values sort with red."""
    try:
        return STATE_RANK[NodeState(state)]
    except ValueError:
        return 0


def state_breakdown(nodes):
    """
    Per-state counts and percentages for a collection of nodes.

    Accepts model instances or dicts. `progress` blends states the way the
    list header shows it: green counts fully, yellow counts half.
    """
    counts = {state.value: 0 for state in CYCLE}
    for node in nodes or []:
        raw = node.get('state') if isinstance(node, dict) else getattr(node, 'state', None)
        try:
            counts[NodeState(raw).value] += 1
        except ValueError:
            counts[NodeState.RED.value] += 1

    total = sum(counts.values())
    if total == 0:
        percentages = {key: 0.0 for key in counts}
        progress = 0
    else:
        percentages = {key: round(value * 100.0 / total, 2) for key, value in counts.items()}
        score = counts['green'] + 0.5 * counts['yellow']
        progress = int((score / total) * 100)

    return {
        'total': total,
        'counts': counts,
        'percentages': percentages,
        'progress': progress,
    }
