import json
from unittest.mock import patch

from django.test import TestCase, override_settings

from fsm_validator.fsm_parser import parse_fsm_definition
from fsm_validator.tests.definitions import DIVBY4, ENDS_IN_ONE, PAIRS


class FSMViewTestCase(TestCase):
    """Base test case with common FSM definitions and utilities"""

    def setUp(self):
        self.divby4_model = parse_fsm_definition(DIVBY4).to_dict()

    def post_json(self, url, data):
        """Helper method to send JSON POST requests"""
        return self.client.post(
            url,
            data=json.dumps(data),
            content_type='application/json'
        )


class ValidateFSMViewTests(FSMViewTestCase):
    """Tests for the definition upload/validation endpoint"""

    def test_valid_definition(self):
        """Test a valid definition returns the parsed model"""
        response = self.post_json('/api/validate-fsm/', {
            'definition': DIVBY4,
            'filename': 'divby4.fsm'
        })

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data['valid'])
        self.assertEqual(data['filename'], 'divby4.fsm')
        self.assertEqual(data['fsm']['name'], 'divby4fsm')
        self.assertEqual(data['fsm']['zeroIndexed'], False)
        self.assertEqual(data['fsm']['transitions']['2'], [['0', '2'], ['1', '3']])

    def test_invalid_definition_reports_line(self):
        """Test a syntax error is reported with its source line"""
        response = self.post_json('/api/validate-fsm/', {
            'definition': DIVBY4.replace('states = 4', 'states = four')
        })

        self.assertEqual(response.status_code, 400)
        data = response.json()
        self.assertFalse(data['valid'])
        self.assertEqual(data['line_number'], 2)
        self.assertEqual(data['error'], 'Line 2: States must be an integer')

    def test_missing_fields_reported_on_line_zero(self):
        """Test a definition without acceptstate fails the pre-check"""
        response = self.post_json('/api/validate-fsm/', {
            'definition': DIVBY4.replace('\nacceptstate = 1', '')
        })

        self.assertEqual(response.status_code, 400)
        data = response.json()
        self.assertEqual(data['line_number'], 0)
        self.assertIn('acceptstate', data['error'])

    def test_missing_definition(self):
        """Test request without a definition"""
        response = self.post_json('/api/validate-fsm/', {'filename': 'a.txt'})

        self.assertEqual(response.status_code, 400)
        self.assertIn('Missing FSM definition', response.json()['error'])

    def test_unsupported_extension(self):
        """Test uploads are limited to .txt and .fsm files"""
        response = self.post_json('/api/validate-fsm/', {
            'definition': DIVBY4,
            'filename': 'divby4.xlsx'
        })

        self.assertEqual(response.status_code, 400)
        self.assertIn('Unsupported file type', response.json()['error'])

    @override_settings(FSM_VALIDATOR={'MAX_DEFINITION_BYTES': 10})
    def test_definition_size_limit(self):
        """Test oversized definitions are refused"""
        response = self.post_json('/api/validate-fsm/', {'definition': DIVBY4})

        self.assertEqual(response.status_code, 400)
        self.assertIn('byte limit', response.json()['error'])

    def test_get_request_not_allowed(self):
        """Test that GET requests are not allowed"""
        response = self.client.get('/api/validate-fsm/')
        self.assertEqual(response.status_code, 405)

    def test_invalid_json(self):
        """Test request with invalid JSON"""
        response = self.client.post(
            '/api/validate-fsm/',
            data='invalid json',
            content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)

    def test_json_body_must_be_object(self):
        """Test a JSON list body is rejected"""
        response = self.post_json('/api/validate-fsm/', [DIVBY4])
        self.assertEqual(response.status_code, 400)

    def test_unexpected_error(self):
        """Test unexpected failures become a 500 response"""
        with patch('fsm_validator.views.parse_fsm_definition', side_effect=RuntimeError('boom')):
            with self.assertLogs('fsm_validator.views', level='ERROR'):
                response = self.post_json('/api/validate-fsm/', {'definition': DIVBY4})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()['error'], 'Server error: boom')


class RunFSMViewTests(FSMViewTestCase):
    """Tests for the run endpoint"""

    def test_run_from_definition(self):
        """Test running input against definition text"""
        response = self.post_json('/api/run-fsm/', {
            'definition': DIVBY4,
            'input': '0101'
        })

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data['accepted'])
        self.assertEqual(data['endState'], 1)
        self.assertEqual([step['state'] for step in data['path']], [1, 1, 1, 1, 1])
        self.assertNotIn('error', data)

    def test_run_from_parsed_model(self):
        """Test running input against a model returned by the validate endpoint"""
        response = self.post_json('/api/run-fsm/', {
            'fsm': self.divby4_model,
            'input': '0110'
        })

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data['accepted'])
        self.assertEqual(data['endState'], 1)

    def test_missing_transition_is_not_an_error(self):
        """Test an unknown symbol is reported as a rejection"""
        response = self.post_json('/api/run-fsm/', {
            'definition': ENDS_IN_ONE,
            'input': '1a'
        })

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertFalse(data['accepted'])
        self.assertEqual(data['endState'], 2)
        self.assertEqual(data['error'], "No transition for 'a' from state 2")

    def test_tampered_model_is_rejected(self):
        """Test a model that breaks the validation rules is refused"""
        model = dict(self.divby4_model, startstate=7)
        response = self.post_json('/api/run-fsm/', {'fsm': model, 'input': '0'})

        self.assertEqual(response.status_code, 400)
        data = response.json()
        self.assertEqual(data['line_number'], 0)
        self.assertIn('Start state 7 is invalid', data['error'])

    def test_missing_fsm(self):
        """Test request without any FSM"""
        response = self.post_json('/api/run-fsm/', {'input': '0'})

        self.assertEqual(response.status_code, 400)
        self.assertIn('Missing FSM definition', response.json()['error'])

    def test_input_must_be_string(self):
        """Test a non-string input is refused"""
        response = self.post_json('/api/run-fsm/', {'definition': DIVBY4, 'input': 101})
        self.assertEqual(response.status_code, 400)

    @override_settings(FSM_VALIDATOR={'MAX_INPUT_LENGTH': 3})
    def test_input_length_limit(self):
        """Test inputs longer than the configured limit are refused"""
        response = self.post_json('/api/run-fsm/', {'definition': DIVBY4, 'input': '0101'})

        self.assertEqual(response.status_code, 400)
        self.assertIn('character limit', response.json()['error'])


class GenerateStatesViewTests(FSMViewTestCase):
    """Tests for the competing-transition step endpoint"""

    def test_generate_states(self):
        """Test steps, chunk size and complexity are returned"""
        response = self.post_json('/api/generate-states/', {
            'fsm': self.divby4_model,
            'input': '01'
        })

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['chunkSize'], 1)
        self.assertEqual(data['competitiveComplexity'], [1, 4])
        self.assertEqual(len(data['steps']), 2)
        self.assertTrue(data['steps'][0]['isAnchor'])
        self.assertEqual(data['steps'][1]['states'][1], {
            'currentState': 2,
            'nextState': 3,
            'upcomingInput': None,
        })

    def test_multi_character_symbols(self):
        """Test chunking follows the first symbol length"""
        response = self.post_json('/api/generate-states/', {
            'definition': PAIRS,
            'input': '00111'
        })

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['chunkSize'], 2)
        self.assertEqual([step['symbol'] for step in data['steps']], ['00', '11', '1'])

    def test_blank_input(self):
        """Test blank input is refused"""
        response = self.post_json('/api/generate-states/', {
            'definition': DIVBY4,
            'input': '   '
        })

        self.assertEqual(response.status_code, 400)
        self.assertIn('Missing input sequence', response.json()['error'])


class EvaluateExperimentsViewTests(FSMViewTestCase):
    """Tests for the experiment evaluation endpoint"""

    def test_evaluate_experiments(self):
        """Test each experiment gets a result and final state"""
        response = self.post_json('/api/evaluate-experiments/', {
            'definition': ENDS_IN_ONE,
            'experiments': [
                {'name': 'Run A', 'fsmInput': '01', 'fluorophore': 'ANS N'},
                {'name': 'Run B', 'fsmInput': '0', 'fluorophore': 'ANS N'},
            ]
        })

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual([row['result'] for row in data['experiments']], ['ACCEPT', 'REJECT'])
        self.assertEqual([row['finalState'] for row in data['experiments']], [2, 1])
        self.assertEqual(data['competingTiles'], ['0A1', '1A2', '0D', '1D', '2D', '3D'])

    def test_invalid_experiment(self):
        """Test a missing name is reported with the experiment number"""
        response = self.post_json('/api/evaluate-experiments/', {
            'definition': ENDS_IN_ONE,
            'experiments': [{'fsmInput': '01', 'fluorophore': 'ANS N'}]
        })

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Experiment 1 is missing a name')

    def test_experiments_must_be_list(self):
        """Test a non-list experiments field is refused"""
        response = self.post_json('/api/evaluate-experiments/', {
            'definition': ENDS_IN_ONE,
            'experiments': 'Run A'
        })

        self.assertEqual(response.status_code, 400)
