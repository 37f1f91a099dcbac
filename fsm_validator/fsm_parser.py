import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set, Tuple

from .fsm_indexing import normalise_indexing
from .fsm_model import FSMData, FSMValidationError, IndexingScheme, TransitionPair
from .fsm_validation import (
    REQUIRED_FIELDS,
    check_required_fields,
    find_missing_fields,
    validate_fsm_rules,
)

logger = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r'name\s*=\s*["\'](.+?)["\']', re.IGNORECASE)
# Numbers are ASCII digits only; \d would otherwise accept e.g. Arabic-Indic digits
STATES_PATTERN = re.compile(r'states\s*=\s*["\']?(\d+)["\']?', re.IGNORECASE | re.ASCII)
SYMBOLS_PATTERN = re.compile(r'symbols\s*=\s*\{(.+?)\}', re.IGNORECASE)
START_STATE_PATTERN = re.compile(r'startstate\s*=\s*(\d+)', re.IGNORECASE | re.ASCII)
ACCEPT_STATE_PATTERN = re.compile(r'acceptstate\s*=\s*(\d+)', re.IGNORECASE | re.ASCII)
INLINE_ROW_PATTERN = re.compile(r'transitions\s*=\s*(\d+[:.]?\s*.+)', re.IGNORECASE | re.ASCII)
ROW_HEADER_PATTERN = re.compile(r'(\d+)[:.]?\s*(.+)', re.ASCII)

# on '0' move '1' -- any word starting with "m" is accepted for "move" so
# typos like "mocve" still parse, as does a stray period after either quote
NATURAL_LANGUAGE_PATTERN = re.compile(
    r'on\s*[\'"](\d+)[\'"]\.?\s*m\w*\s*[\'"](\d+)[\'"]\.?', re.IGNORECASE | re.ASCII
)
DIGITS_PATTERN = re.compile(r'\d+', re.ASCII)

# Longest digit run accepted for a state number
MAX_STATE_DIGITS = 9

# Keywords that close an open transitions block
BLOCK_TERMINATORS = ('name', 'states', 'symbols', 'startstate', 'acceptstate')


@dataclass
class ParseState:
    """Everything accumulated while reading one definition. Never shared between parses."""
    name: Optional[str] = None
    states: Optional[int] = None
    symbols: Optional[List[str]] = None
    transitions: Dict[int, List[TransitionPair]] = field(default_factory=dict)
    startstate: Optional[int] = None
    acceptstate: Optional[int] = None
    fields_found: Set[str] = field(default_factory=set)
    current_line: int = 0


def parse_state_number(digits: str, line_number: int) -> int:
    """Converts a matched digit run, refusing runs longer than MAX_STATE_DIGITS."""
    if len(digits) > MAX_STATE_DIGITS:
        raise FSMValidationError(
            line_number, f"State number '{digits[:MAX_STATE_DIGITS]}...' exceeds {MAX_STATE_DIGITS} digits"
        )
    return int(digits)


def parse_natural_language_row(body: str) -> List[TransitionPair]:
    """Collects every "on '<symbol>' move '<target>'" clause on the row, left to right."""
    return [(match.group(1), match.group(2)) for match in NATURAL_LANGUAGE_PATTERN.finditer(body)]


def parse_dotted_row(body: str) -> List[TransitionPair]:
    """Collects legacy "<symbol>.<target>" tokens from a comma-separated row."""
    pairs = []
    for token in body.split(','):
        parts = [part.strip() for part in token.strip().split('.')]
        if len(parts) == 2 and all(DIGITS_PATTERN.fullmatch(part) for part in parts):
            pairs.append((parts[0], parts[1]))
    return pairs


# Tried in order; the first dialect that finds any pair wins
ROW_DIALECTS: Tuple[Callable[[str], List[TransitionPair]], ...] = (
    parse_natural_language_row,
    parse_dotted_row,
)


class FSMParser:
    """
    Parser for the line-oriented FSM definition format.

    Example:
        Name = "divby4fsm"
        states = 4
        symbols = {0, 1}
        transitions = 1: on '0' Move '1', on '1' Move '1'
                2: on '0' move '2', on '1' Move '3'
                3. On '0' move '1', on '1' move '1'
                4. 0.2, 1.3
        startstate = 1
        acceptstate = 1

    Keywords are case-insensitive. Transition rows start with the state label
    and may use either the natural-language or the legacy dotted dialect.
    """

    def parse(self, content: str) -> FSMData:
        """
        Parses and validates a definition.

        Args:
            content: The raw definition text

        Returns:
            FSMData: The validated model in its canonical indexing scheme

        Raises:
            FSMValidationError: with the 1-based source line, or 0 for whole-document problems
        """
        lines = content.split('\n')

        missing = find_missing_fields(''.join(lines))
        if missing:
            raise FSMValidationError(0, f"Missing required fields: {', '.join(missing)}")

        state = ParseState()
        self._parse_fields(lines, state)

        normalised = normalise_indexing(state.transitions, state.states, state.startstate, state.acceptstate)

        check_required_fields(state.fields_found)

        fsm = FSMData(
            name=state.name,
            states=state.states,
            symbols=tuple(state.symbols),
            transitions={source: tuple(pairs) for source, pairs in normalised.transitions.items()},
            startstate=normalised.startstate,
            acceptstate=normalised.acceptstate,
            indexing=normalised.indexing,
        )
        validate_fsm_rules(fsm)
        return fsm

    def _parse_fields(self, lines: List[str], state: ParseState) -> None:
        i = 0
        while i < len(lines):
            line = lines[i].strip()
            state.current_line = i + 1

            if not line:
                i += 1
                continue

            line_lower = line.lower()
            if line_lower.startswith('name'):
                self._parse_name(line, state)
            elif line_lower.startswith('states'):
                self._parse_states(line, state)
            elif line_lower.startswith('symbols'):
                self._parse_symbols(line, state)
            elif line_lower.startswith('transitions'):
                i = self._parse_transitions(lines, i, state)
            elif line_lower.startswith('startstate'):
                self._parse_start_state(line, state)
            elif line_lower.startswith('acceptstate'):
                self._parse_accept_state(line, state)

            i += 1

    def _parse_name(self, line: str, state: ParseState) -> None:
        match = NAME_PATTERN.search(line)
        if not match:
            raise FSMValidationError(state.current_line, 'Name must be in format: Name = "value"')
        state.name = match.group(1)
        state.fields_found.add('name')

    def _parse_states(self, line: str, state: ParseState) -> None:
        match = STATES_PATTERN.search(line)
        if not match:
            raise FSMValidationError(state.current_line, 'States must be an integer')
        state.states = parse_state_number(match.group(1), state.current_line)
        state.fields_found.add('states')

    def _parse_symbols(self, line: str, state: ParseState) -> None:
        match = SYMBOLS_PATTERN.search(line)
        if not match:
            raise FSMValidationError(state.current_line, 'Symbols must be in format: symbols = {0, 1}')
        state.symbols = [symbol.strip() for symbol in match.group(1).split(',')]
        state.fields_found.add('symbols')

    def _parse_start_state(self, line: str, state: ParseState) -> None:
        match = START_STATE_PATTERN.search(line)
        if not match:
            raise FSMValidationError(state.current_line, 'Start state must be an integer')
        state.startstate = parse_state_number(match.group(1), state.current_line)
        state.fields_found.add('startstate')

    def _parse_accept_state(self, line: str, state: ParseState) -> None:
        match = ACCEPT_STATE_PATTERN.search(line)
        if not match:
            raise FSMValidationError(state.current_line, 'Accept state must be an integer')
        state.acceptstate = parse_state_number(match.group(1), state.current_line)
        state.fields_found.add('acceptstate')

    def _parse_transitions(self, lines: List[str], start_index: int, state: ParseState) -> int:
        """
        Consumes a transitions block starting at the "transitions =" line.

        Returns:
            int: Index of the last line belonging to the block
        """
        state.fields_found.add('transitions')

        inline_match = INLINE_ROW_PATTERN.search(lines[start_index].strip())
        if inline_match:
            state.current_line = start_index + 1
            self._parse_transition_row(inline_match.group(1), state)

        i = start_index + 1
        while i < len(lines):
            line = lines[i].strip()
            state.current_line = i + 1

            if not line:
                i += 1
                continue

            if line.lower().startswith(BLOCK_TERMINATORS):
                return i - 1

            self._parse_transition_row(line, state)
            i += 1

        return i

    def _parse_transition_row(self, line: str, state: ParseState) -> None:
        match = ROW_HEADER_PATTERN.match(line)
        if not match:
            raise FSMValidationError(state.current_line, f"Invalid transition format: '{line}'")

        source = parse_state_number(match.group(1), state.current_line)
        body = match.group(2)

        pairs = []
        for dialect in ROW_DIALECTS:
            pairs = dialect(body)
            if pairs:
                break

        if not pairs:
            raise FSMValidationError(state.current_line, f"No valid transitions found in: '{line}'")

        for _, target in pairs:
            parse_state_number(target, state.current_line)

        state.transitions[source] = pairs


def parse_fsm_definition(content: str) -> FSMData:
    """Parse FSM definition text into a validated FSMData."""
    try:
        fsm = FSMParser().parse(content)
    except FSMValidationError as e:
        logger.info("FSM definition rejected at line %d: %s", e.line_number, e.message)
        raise
    logger.debug("Parsed FSM '%s' with %d states (%s)", fsm.name, fsm.states, fsm.indexing.value)
    return fsm


def _model_integer(value, field_name: str) -> int:
    # bool is an int subclass
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and DIGITS_PATTERN.fullmatch(value):
        return parse_state_number(value, 0)
    raise FSMValidationError(0, f"{field_name} must be an integer, got {value!r}")


def load_fsm_dict(data: Dict) -> FSMData:
    """
    Rebuilds an FSMData from the dictionary produced by FSMData.to_dict().

    The dictionary is trusted for nothing: every validation rule is applied
    again, so a client echoing back a model cannot hand over an invalid one.

    Raises:
        FSMValidationError: on line 0 when the dictionary is malformed or breaks a rule
    """
    if not isinstance(data, dict):
        raise FSMValidationError(0, 'FSM must be a dictionary')

    check_required_fields(key for key in REQUIRED_FIELDS if key in data)

    name = data['name']
    if not isinstance(name, str) or not name:
        raise FSMValidationError(0, 'Name must be a non-empty string')

    num_states = _model_integer(data['states'], 'states')
    startstate = _model_integer(data['startstate'], 'startstate')
    acceptstate = _model_integer(data['acceptstate'], 'acceptstate')

    try:
        symbols = tuple(str(symbol) for symbol in data['symbols'])
        transitions = {
            _model_integer(source, 'transition state'): tuple(
                (str(symbol), str(target)) for symbol, target in pairs
            )
            for source, pairs in data['transitions'].items()
        }
    except FSMValidationError:
        raise
    except (TypeError, ValueError, AttributeError) as e:
        raise FSMValidationError(0, f"Malformed FSM: {e}") from e

    for source, pairs in transitions.items():
        for symbol, target in pairs:
            if not DIGITS_PATTERN.fullmatch(target):
                raise FSMValidationError(0, f"State {source}: transition on '{symbol}' has non-numeric target '{target}'")
            parse_state_number(target, 0)

    indexing = IndexingScheme.ZERO_BASED if data.get('zeroIndexed') else IndexingScheme.ONE_BASED
    fsm = FSMData(
        name=name,
        states=num_states,
        symbols=symbols,
        transitions=transitions,
        startstate=startstate,
        acceptstate=acceptstate,
        indexing=indexing,
    )
    validate_fsm_rules(fsm)
    return fsm
