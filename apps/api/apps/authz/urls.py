"""
Authz URLs - admin login (JWT), token refresh/verify, current user.
"""
from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView, TokenVerifyView

from .views import AdminLoginView, MeView

urlpatterns = [
    path('login/', AdminLoginView.as_view(), name='auth-login'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('token/verify/', TokenVerifyView.as_view(), name='token_verify'),
    path('me/', MeView.as_view(), name='auth-me'),
]
