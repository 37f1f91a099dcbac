from typing import Dict, List, NamedTuple, Optional

from .fsm_model import FSMData, target_state


class StateStep(NamedTuple):
    current_state: int
    next_state: Optional[int]
    upcoming_input: Optional[str]

    def to_dict(self) -> Dict:
        return {
            'currentState': self.current_state,
            'nextState': self.next_state,
            'upcomingInput': self.upcoming_input,
        }


class StepResult(NamedTuple):
    """All transitions competing for one chunk of the input"""
    position: int
    symbol: str
    is_anchor: bool
    states: List[StateStep]

    def to_dict(self) -> Dict:
        return {
            'position': self.position,
            'symbol': self.symbol,
            'isAnchor': self.is_anchor,
            'states': [state.to_dict() for state in self.states],
        }


class GenerationResult(NamedTuple):
    steps: List[StepResult]

    def to_dict(self) -> Dict:
        return {'steps': [step.to_dict() for step in self.steps]}


def get_transition(fsm: FSMData, state: int, symbol: str) -> Optional[int]:
    """First target for symbol in the state's row, or None when there is no such transition."""
    for pair in fsm.transitions.get(state, ()):
        if pair[0] == symbol:
            return target_state(pair)
    return None


def split_into_chunks(input_string: str, chunk_size: int) -> List[str]:
    """Consecutive chunk_size slices; a trailing remainder becomes a shorter final chunk."""
    return [input_string[i:i + chunk_size] for i in range(0, len(input_string), chunk_size)]


def generate_fsm_steps(fsm: FSMData, input_string: str) -> GenerationResult:
    """
    Lists, for every chunk of the input, the transitions that compete for it.

    The anchor position (0) only looks at the start state. Every later position
    sweeps states 1..fsm.states whatever the model's indexing, so on a 0-based
    model state 0 is skipped and the label past the last state yields None.

    Args:
        fsm: A validated FSM
        input_string: The input, chunked by the length of the first declared symbol

    Returns:
        GenerationResult: one StepResult per chunk, in input order
    """
    chunks = split_into_chunks(input_string, fsm.chunk_size)
    steps = []

    for position, symbol in enumerate(chunks):
        upcoming_input = chunks[position + 1] if position < len(chunks) - 1 else None
        is_anchor = position == 0

        if is_anchor:
            candidates = [fsm.startstate]
        else:
            # TODO: sweep fsm.state_range once 0-based models are confirmed to need it
            candidates = range(1, fsm.states + 1)

        states = [
            StateStep(state, get_transition(fsm, state, symbol), upcoming_input)
            for state in candidates
        ]
        steps.append(StepResult(position, symbol, is_anchor, states))

    return GenerationResult(steps)
