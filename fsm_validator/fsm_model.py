from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


TransitionPair = Tuple[str, str]


class FSMValidationError(ValueError):
    """
    Raised when an FSM definition cannot be parsed or breaks a validation rule.

    line_number is 1-based; 0 means the problem concerns the whole document
    (missing fields, counts, out-of-range states) rather than one line.
    """

    def __init__(self, line_number: int, message: str):
        super().__init__(f"Line {line_number}: {message}")
        self.line_number = line_number
        self.message = message


class IndexingScheme(Enum):
    """Canonical numbering of state identifiers, resolved once at parse time."""
    ZERO_BASED = 'zero_based'
    ONE_BASED = 'one_based'

    @property
    def first_state(self) -> int:
        return 0 if self is IndexingScheme.ZERO_BASED else 1

    def state_range(self, num_states: int) -> range:
        """All canonical state identifiers for a machine with num_states states."""
        return range(self.first_state, self.first_state + num_states)


@dataclass(frozen=True)
class FSMData:
    """
    A parsed and validated deterministic FSM.

    transitions maps each canonical source state to its (symbol, target) pairs
    in authored order. Targets are kept as the digit strings that were written;
    use target_state() to read one as an integer.
    """
    name: str
    states: int
    symbols: Tuple[str, ...]
    transitions: Dict[int, Tuple[TransitionPair, ...]]
    startstate: int
    acceptstate: int
    indexing: IndexingScheme = IndexingScheme.ONE_BASED

    @property
    def zero_indexed(self) -> bool:
        return self.indexing is IndexingScheme.ZERO_BASED

    @property
    def state_range(self) -> range:
        return self.indexing.state_range(self.states)

    @property
    def chunk_size(self) -> int:
        """Character length of one input symbol, taken from the first declared symbol."""
        if self.symbols and self.symbols[0]:
            return len(self.symbols[0])
        return 1

    def to_dict(self) -> Dict:
        """JSON-friendly representation, keyed the way front-end collaborators expect."""
        return {
            'name': self.name,
            'states': self.states,
            'symbols': list(self.symbols),
            'transitions': {
                str(state): [list(pair) for pair in pairs]
                for state, pairs in self.transitions.items()
            },
            'startstate': self.startstate,
            'acceptstate': self.acceptstate,
            'zeroIndexed': self.zero_indexed,
        }


def target_state(pair: TransitionPair) -> int:
    return int(pair[1])
