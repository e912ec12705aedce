from django.urls import path
from .views import (
    health, register, login_view, logout_view, auth_user,
    password_forgot, password_reset, audit_log_list
)

urlpatterns = [
    path('health', health, name='health'),

    # Auth endpoints
    path('register', register, name='register'),
    path('login', login_view, name='login'),
    path('logout', logout_view, name='logout'),
    path('auth/user', auth_user, name='auth-user'),
    path('password/forgot', password_forgot, name='password-forgot'),
    path('password/reset', password_reset, name='password-reset'),

    path('audit-logs', audit_log_list, name='audit-log-list'),
]
