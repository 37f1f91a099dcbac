from django.apps import AppConfig


class FsmValidatorConfig(AppConfig):
    name = 'fsm_validator'
    verbose_name = 'FSM Validator'
