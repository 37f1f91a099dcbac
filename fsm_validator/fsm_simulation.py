from typing import Dict, List, NamedTuple, Optional, Tuple

from .fsm_model import FSMData, target_state


class PathStep(NamedTuple):
    """One visited state; symbol is the input character that led here (None for the start state)"""
    state: int
    symbol: Optional[str] = None

    def to_dict(self) -> Dict:
        if self.symbol is None:
            return {'state': self.state}
        return {'state': self.state, 'symbol': self.symbol}


class RunResult(NamedTuple):
    """Outcome of replaying one input string against an FSM"""
    accepted: bool
    path: List[PathStep]
    end_state: int
    error: Optional[str] = None

    def to_dict(self) -> Dict:
        result = {
            'accepted': self.accepted,
            'path': [step.to_dict() for step in self.path],
            'endState': self.end_state,
        }
        if self.error is not None:
            result['error'] = self.error
        return result


def build_transition_map(fsm: FSMData) -> Dict[Tuple[int, str], int]:
    """
    Flattens the transition rows into a (state, symbol) -> target lookup.

    If a row repeats a symbol the first entry is kept.
    """
    transition_map = {}
    for state, pairs in fsm.transitions.items():
        for pair in pairs:
            transition_map.setdefault((state, pair[0]), target_state(pair))
    return transition_map


def run_fsm(fsm: FSMData, input_string: str) -> RunResult:
    """
    Simulates the FSM on the given input string, one character per step.

    Args:
        fsm: A validated FSM
        input_string: The input to replay; each character is looked up as a symbol

    Returns:
        RunResult: accepted is True only when the whole input is consumed and the
        machine stops in the accept state. When a character has no transition the
        run stops there: the path holds the states visited so far, end_state is the
        state the machine was in, and error explains which lookup failed.
    """
    transition_map = build_transition_map(fsm)

    current_state = fsm.startstate
    path = [PathStep(current_state)]

    for symbol in input_string:
        key = (current_state, symbol)
        if key not in transition_map:
            return RunResult(
                accepted=False,
                path=path,
                end_state=current_state,
                error=f"No transition for '{symbol}' from state {current_state}",
            )

        current_state = transition_map[key]
        path.append(PathStep(current_state, symbol))

    return RunResult(
        accepted=current_state == fsm.acceptstate,
        path=path,
        end_state=current_state,
    )
