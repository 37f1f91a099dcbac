from django.urls import path
from . import views

urlpatterns = [
    # Parse and validate a definition
    path('api/validate-fsm/', views.validate_definition, name='validate_fsm'),

    # Execution
    path('api/run-fsm/', views.run_fsm_input, name='run_fsm'),
    path('api/generate-states/', views.generate_states, name='generate_states'),

    # Laboratory experiment evaluation
    path('api/evaluate-experiments/', views.evaluate_experiments, name='evaluate_experiments'),
]
