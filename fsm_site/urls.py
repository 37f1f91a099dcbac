from django.urls import include, path

urlpatterns = [
    path('', include('fsm_validator.urls')),
]
