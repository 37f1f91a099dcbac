from typing import Iterable, List

from .fsm_model import FSMData, FSMValidationError, target_state


REQUIRED_FIELDS = ('name', 'states', 'symbols', 'transitions', 'startstate', 'acceptstate')


def find_missing_fields(content: str) -> List[str]:
    """Required keywords that never appear anywhere in the text (case-insensitive)."""
    content_lower = content.lower()
    return [field for field in REQUIRED_FIELDS if field not in content_lower]


def check_required_fields(fields_found: Iterable[str]) -> None:
    """
    Ensures every required field was successfully parsed.

    Raises:
        FSMValidationError: on line 0, naming every field that was not found
    """
    found = set(fields_found)
    missing = [field for field in REQUIRED_FIELDS if field not in found]
    if missing:
        raise FSMValidationError(0, f"Missing required fields: {', '.join(missing)}")


def validate_fsm_rules(fsm: FSMData) -> None:
    """
    Checks the cross-field consistency rules over a canonically indexed FSM.

    The rules are applied in a fixed order and the first violation wins:
    1. One transition row per state in the canonical range
    2. Start and accept states inside the canonical range
    3. One transition per declared symbol in each row
    4. Every transition target inside the canonical range

    Args:
        fsm: The candidate model, already passed through the indexing normaliser

    Raises:
        FSMValidationError: on line 0 for any violation
    """
    expected_states = list(fsm.state_range)
    scheme_label = '0-based' if fsm.zero_indexed else '1-based'

    if len(fsm.transitions) != len(expected_states):
        raise FSMValidationError(
            0,
            f"Number of transitions ({len(fsm.transitions)}) must equal number of states "
            f"({len(expected_states)}). Using {scheme_label} indexing. "
            f"Expected states: {', '.join(str(state) for state in expected_states)}"
        )

    for state in expected_states:
        if state not in fsm.transitions:
            raise FSMValidationError(0, f"State {state} has no transitions defined")

    min_state = fsm.indexing.first_state
    max_state = min_state + fsm.states - 1

    if not min_state <= fsm.startstate <= max_state:
        raise FSMValidationError(
            0, f"Start state {fsm.startstate} is invalid. Must be between {min_state} and {max_state}"
        )

    if not min_state <= fsm.acceptstate <= max_state:
        raise FSMValidationError(
            0, f"Accept state {fsm.acceptstate} is invalid. Must be between {min_state} and {max_state}"
        )

    num_symbols = len(fsm.symbols)
    for state, pairs in fsm.transitions.items():
        if len(pairs) != num_symbols:
            raise FSMValidationError(
                0, f"State {state} has {len(pairs)} transitions but {num_symbols} symbols defined"
            )

    for state, pairs in fsm.transitions.items():
        for pair in pairs:
            target = target_state(pair)
            if not min_state <= target <= max_state:
                raise FSMValidationError(
                    0,
                    f"State {state}: transition on '{pair[0]}' goes to invalid state {target}. "
                    f"Must be between {min_state} and {max_state}"
                )
