from django.conf import settings

DEFAULTS = {
    'MAX_DEFINITION_BYTES': 65536,
    'MAX_INPUT_LENGTH': 4096,
    'ALLOWED_EXTENSIONS': ('.txt', '.fsm'),
}


def get_setting(name: str):
    """Looks up an app setting, letting the FSM_VALIDATOR dict in Django settings override the defaults."""
    overrides = getattr(settings, 'FSM_VALIDATOR', {})
    return overrides.get(name, DEFAULTS[name])
