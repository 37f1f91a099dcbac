from typing import Dict, List, NamedTuple

from .fsm_model import FSMData, target_state
from .fsm_simulation import run_fsm
from .fsm_steps import GenerationResult

ACCEPT = 'ACCEPT'
REJECT = 'REJECT'

STATE_LABELS = ['A', 'B', 'C', 'D']
TERMINAL_TILES = ['0D', '1D', '2D', '3D']


class ExperimentValidationError(ValueError):
    pass


class ExperimentOutcome(NamedTuple):
    result: str
    final_state: int


def evaluate_fsm(fsm: FSMData, input_string: str) -> ExperimentOutcome:
    """Runs the input and reports ACCEPT or REJECT together with the state the run ended in."""
    run = run_fsm(fsm, input_string)
    return ExperimentOutcome(ACCEPT if run.accepted else REJECT, run.end_state)


def _state_label(state: int) -> str:
    if 1 <= state <= len(STATE_LABELS):
        return STATE_LABELS[state - 1]
    return f"S{state}"


def competing_tiles(fsm: FSMData) -> List[str]:
    """
    Tile names for every transition out of states 1..states-1, plus the terminal tiles.

    A tile is "<symbol><state label><target>", e.g. "0A2" for state 1 moving to
    state 2 on '0'. Duplicates are dropped, keeping the first occurrence.
    """
    tiles = []
    for state in range(1, fsm.states):
        for pair in fsm.transitions.get(state, ()):
            tiles.append(f"{pair[0]}{_state_label(state)}{target_state(pair)}")

    tiles.extend(TERMINAL_TILES)
    return list(dict.fromkeys(tiles))


def competitive_complexity(result: GenerationResult) -> List[int]:
    """Number of states with a defined transition at each position."""
    return [
        sum(1 for state in step.states if state.next_state is not None)
        for step in result.steps
    ]


def validate_experiments(fsm: FSMData, experiments: List[Dict]) -> List[Dict]:
    """
    Checks each experiment row and evaluates its input against the FSM.

    Args:
        fsm: A validated FSM
        experiments: Rows with 'name', 'fsmInput' and 'fluorophore' keys

    Returns:
        List[Dict]: The rows with surrounding whitespace removed and 'result'
        and 'finalState' filled in

    Raises:
        ExperimentValidationError: naming the first offending experiment (1-based)
    """
    if not experiments:
        raise ExperimentValidationError('You must have at least 1 experiment')

    evaluated = []
    for index, experiment in enumerate(experiments, start=1):
        if not isinstance(experiment, dict):
            raise ExperimentValidationError(f"Experiment {index} must be an object")

        name = str(experiment.get('name') or '').strip()
        fsm_input = str(experiment.get('fsmInput') or '').strip()
        fluorophore = str(experiment.get('fluorophore') or '').strip()

        if not name:
            raise ExperimentValidationError(f"Experiment {index} is missing a name")
        if not fsm_input:
            raise ExperimentValidationError(f"Experiment {index} is missing an FSM input value")
        if not fluorophore:
            raise ExperimentValidationError(f"Experiment {index} is missing a fluorophore")

        outcome = evaluate_fsm(fsm, fsm_input)
        evaluated.append({
            'name': name,
            'fsmInput': fsm_input,
            'fluorophore': fluorophore,
            'result': outcome.result,
            'finalState': outcome.final_state,
        })

    return evaluated
