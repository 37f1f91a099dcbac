from .fsm_model import FSMData, FSMValidationError, IndexingScheme
from .fsm_parser import FSMParser, load_fsm_dict, parse_fsm_definition
from .fsm_simulation import RunResult, run_fsm
from .fsm_steps import GenerationResult, generate_fsm_steps

__all__ = [
    'FSMData',
    'FSMParser',
    'FSMValidationError',
    'GenerationResult',
    'IndexingScheme',
    'RunResult',
    'generate_fsm_steps',
    'load_fsm_dict',
    'parse_fsm_definition',
    'run_fsm',
]
