from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from .fsm_model import IndexingScheme, TransitionPair


class IndexingResult(NamedTuple):
    """Transition rows and start/accept states rewritten into the detected scheme"""
    transitions: Dict[int, Sequence[TransitionPair]]
    startstate: Optional[int]
    acceptstate: Optional[int]
    indexing: IndexingScheme


def detect_indexing_scheme(transitions: Dict[int, Sequence[TransitionPair]],
                           num_states: Optional[int]) -> Tuple[IndexingScheme, bool]:
    """
    Decide which numbering scheme the rows were authored in.

    Returns the scheme and whether the rows are in the "shifted" form
    (labelled 1..N while targets run 0..N-1) and need relabelling.
    """
    if not transitions:
        return IndexingScheme.ONE_BASED, False

    # Rows labelled from 0 are taken as authored
    if 0 in transitions:
        return IndexingScheme.ZERO_BASED, False

    num_states = num_states or 0
    targets = _target_states(transitions)
    looks_shifted = (
        num_states > 0
        and bool(targets)
        and min(transitions) == 1
        and max(transitions) == num_states
        and min(targets) == 0
        and max(targets) == num_states - 1
    )
    if looks_shifted:
        return IndexingScheme.ZERO_BASED, True

    return IndexingScheme.ONE_BASED, False


def normalise_indexing(transitions: Dict[int, Sequence[TransitionPair]],
                       num_states: Optional[int],
                       startstate: Optional[int],
                       acceptstate: Optional[int]) -> IndexingResult:
    """
    Rewrite transition row keys and start/accept states into one canonical scheme.

    Only the shifted form is rewritten: every row label and the start/accept
    states drop by one, since they were written in the same label space.
    Targets are never touched. Running the result through again is a no-op.

    Args:
        transitions: Raw rows keyed by the authored state label
        num_states: The declared state count
        startstate: The authored start state (None if it was never declared)
        acceptstate: The authored accept state (None if it was never declared)

    Returns:
        IndexingResult with fresh containers; the inputs are not modified
    """
    scheme, shifted = detect_indexing_scheme(transitions, num_states)

    if not shifted:
        return IndexingResult(dict(transitions), startstate, acceptstate, scheme)

    relabelled = {state - 1: pairs for state, pairs in transitions.items()}
    if startstate is not None:
        startstate -= 1
    if acceptstate is not None:
        acceptstate -= 1

    return IndexingResult(relabelled, startstate, acceptstate, scheme)


def _target_states(transitions: Dict[int, Sequence[TransitionPair]]) -> List[int]:
    targets = []
    for pairs in transitions.values():
        targets.extend(int(target) for _, target in pairs)
    return targets
