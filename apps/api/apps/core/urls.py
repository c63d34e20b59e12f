"""
Core API URLs - API index.
"""
from django.urls import path

from .views import ApiIndexView

urlpatterns = [
    path('', ApiIndexView.as_view(), name='api-index'),
]
