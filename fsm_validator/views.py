import json
import logging
import os

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from .conf import get_setting
from .experiments import (
    ExperimentValidationError,
    competing_tiles,
    competitive_complexity,
    validate_experiments,
)
from .fsm_model import FSMValidationError
from .fsm_parser import load_fsm_dict, parse_fsm_definition
from .fsm_simulation import run_fsm
from .fsm_steps import generate_fsm_steps

logger = logging.getLogger(__name__)


def _read_json(request):
    data = json.loads(request.body)
    if not isinstance(data, dict):
        raise ValueError('Request body must be a JSON object')
    return data


def _load_fsm(data):
    """
    Builds the FSM a request refers to, either from definition text or from
    a model previously returned by the validate endpoint. Returns None if the
    request carries neither.
    """
    if data.get('definition'):
        definition = data['definition']
        if not isinstance(definition, str):
            raise ValueError('definition must be a string')
        _check_definition_size(definition)
        return parse_fsm_definition(definition)
    if data.get('fsm'):
        return load_fsm_dict(data['fsm'])
    return None


def _check_definition_size(definition):
    max_bytes = get_setting('MAX_DEFINITION_BYTES')
    if len(definition.encode('utf-8')) > max_bytes:
        raise ValueError(f'Definition exceeds the {max_bytes} byte limit')


def _read_input(data):
    input_string = data.get('input', '')
    if not isinstance(input_string, str):
        raise ValueError('input must be a string')
    max_length = get_setting('MAX_INPUT_LENGTH')
    if len(input_string) > max_length:
        raise ValueError(f'Input exceeds the {max_length} character limit')
    return input_string


def _validation_error_response(error, status=400):
    return JsonResponse({
        'valid': False,
        'error': str(error),
        'line_number': error.line_number,
    }, status=status)


@csrf_exempt
@require_POST
def validate_definition(request):
    """
    Django view to parse and validate an uploaded FSM definition.

    Expects a POST request with a JSON body containing:
    - definition: The raw definition text
    - filename: Optional display name of the uploaded file

    Returns a JSON response with the parsed FSM, or the error message and
    line number the author should fix.
    """
    try:
        data = _read_json(request)
        definition = data.get('definition')
        filename = data.get('filename')

        if not definition:
            return JsonResponse({'error': 'Missing FSM definition'}, status=400)
        if not isinstance(definition, str):
            return JsonResponse({'error': 'definition must be a string'}, status=400)

        if filename:
            allowed = get_setting('ALLOWED_EXTENSIONS')
            extension = os.path.splitext(str(filename))[1].lower()
            if extension not in allowed:
                return JsonResponse({
                    'error': f"Unsupported file type '{extension}'. Supported: {', '.join(allowed)}"
                }, status=400)

        _check_definition_size(definition)
        fsm = parse_fsm_definition(definition)

        return JsonResponse({
            'valid': True,
            'fsm': fsm.to_dict(),
            'filename': filename,
        })

    except FSMValidationError as e:
        return _validation_error_response(e)
    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception('Unexpected error validating FSM definition')
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def run_fsm_input(request):
    """
    Django view to run an input string against an FSM.

    Expects a POST request with a JSON body containing:
    - definition or fsm: The FSM as text or as returned by the validate endpoint
    - input: The input string to run

    A missing transition is not an error here: the response reports
    accepted=False with the path so far and an explanation.
    """
    try:
        data = _read_json(request)
        fsm = _load_fsm(data)
        if fsm is None:
            return JsonResponse({'error': 'Missing FSM definition'}, status=400)

        result = run_fsm(fsm, _read_input(data))
        return JsonResponse(result.to_dict())

    except FSMValidationError as e:
        return _validation_error_response(e)
    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception('Unexpected error running FSM')
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def generate_states(request):
    """
    Django view to list the competing transitions at each input position.
    """
    try:
        data = _read_json(request)
        fsm = _load_fsm(data)
        if fsm is None:
            return JsonResponse({'error': 'Missing FSM definition'}, status=400)

        input_string = _read_input(data)
        if not input_string.strip():
            return JsonResponse({'error': 'Missing input sequence'}, status=400)

        result = generate_fsm_steps(fsm, input_string)
        response = result.to_dict()
        response['chunkSize'] = fsm.chunk_size
        response['competitiveComplexity'] = competitive_complexity(result)
        return JsonResponse(response)

    except FSMValidationError as e:
        return _validation_error_response(e)
    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception('Unexpected error generating FSM steps')
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def evaluate_experiments(request):
    """
    Django view to evaluate laboratory experiment rows against an FSM.

    Expects a POST request with a JSON body containing:
    - definition or fsm: The FSM
    - experiments: List of {name, fsmInput, fluorophore}

    Returns each experiment with its ACCEPT/REJECT result and final state,
    plus the competing tiles the experiments need.
    """
    try:
        data = _read_json(request)
        fsm = _load_fsm(data)
        if fsm is None:
            return JsonResponse({'error': 'Missing FSM definition'}, status=400)

        experiments = data.get('experiments')
        if not isinstance(experiments, list):
            return JsonResponse({'error': 'experiments must be a list'}, status=400)

        return JsonResponse({
            'experiments': validate_experiments(fsm, experiments),
            'competingTiles': competing_tiles(fsm),
        })

    except FSMValidationError as e:
        return _validation_error_response(e)
    except ExperimentValidationError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception('Unexpected error evaluating experiments')
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)
