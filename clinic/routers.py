"""
URL mappings for the clinic app.

API actions live under ``/api/`` and authorize through DRF permission
classes; everything else is a page route guarded by
:class:`clinic.middleware.RouteGuardMiddleware`.  Trailing slashes are
deliberately omitted.
"""
from django.urls import include, path, re_path

from .auth_views import (
    create_password_view,
    forget_password_view,
    github_authorize_view,
    github_callback_view,
    login_view,
    logout_view,
    menu_view,
    session_view,
    signup_view,
    verify_view,
)
from .views import access, appointments, doctors, health, memberships, uploads, users
from .views.dashboard import dashboard_view
from .views.directory import directory_urls
from .views.pages import page_view
from .views.seed import seed_view


urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),
    path('api/seed', seed_view, name='seed'),
    # Authentication
    path('api/auth/signup', signup_view, name='signup'),
    path('api/auth/login', login_view, name='login'),
    path('api/auth/logout', logout_view, name='logout'),
    path('api/auth/verify', verify_view, name='verify'),
    path('api/auth/forget', forget_password_view, name='forget'),
    path('api/auth/create-password', create_password_view, name='create_password'),
    path('api/auth/session', session_view, name='session'),
    path('api/auth/github', github_authorize_view, name='github_authorize'),
    path('api/auth/github/callback', github_callback_view, name='github_callback'),
    path('api/menu', menu_view, name='menu'),
    path('api/dashboard', dashboard_view, name='dashboard'),
    # Roles & permissions
    path('api/roles', access.roles, name='roles'),
    path('api/roles/assign', access.assign_roles, name='assign_roles'),
    path('api/permissions', access.permissions, name='permissions'),
    path('api/permissions/assign', access.assign_permissions, name='assign_permissions'),
    # Users
    path('api/users', users.list_users, name='users'),
    path('api/users/delete', users.delete_users, name='users_delete'),
    path('api/users/verify', users.toggle_verified, name='users_verify'),
    path('api/users/<int:user_id>', users.user_detail, name='user_detail'),
    path('api/profile', users.profile, name='profile'),
    path('api/profile/bio', users.bio, name='profile_bio'),
    # Doctors & appointments
    path('api/doctors', doctors.doctors, name='doctors'),
    path('api/doctors/<int:doctor_id>', doctors.doctor_detail, name='doctor_detail'),
    path('api/doctors/<int:doctor_id>/delete', doctors.delete_doctor, name='doctor_delete'),
    path('api/doctors/<int:doctor_id>/appointments', appointments.book, name='book_appointment'),
    path('api/appointments', appointments.list_appointments, name='appointments'),
    path('api/appointments/delete', appointments.delete_appointments, name='appointments_delete'),
    path('api/appointments/<int:appointment_id>', appointments.appointment_detail, name='appointment_detail'),
    path('api/appointments/<int:appointment_id>/status', appointments.update_status, name='appointment_status'),
    # Memberships
    path('api/memberships', memberships.memberships, name='memberships'),
    path('api/memberships/delete', memberships.delete_memberships, name='memberships_delete'),
    path('api/memberships/<int:membership_id>', memberships.membership_detail, name='membership_detail'),
    path('api/subscriptions', memberships.subscriptions, name='subscriptions'),
    path('api/subscriptions/delete', memberships.delete_subscriptions, name='subscriptions_delete'),
    path('api/subscriptions/<int:subscription_id>', memberships.subscription_detail,
         name='subscription_detail'),
    path('api/subscriptions/<int:subscription_id>/pay', memberships.pay, name='subscription_pay'),
    # Uploads
    path('api/upload', uploads.upload, name='upload'),
    path('api/upload/<str:name>', uploads.uploaded_file, name='uploaded_file'),
    # Directories & pharmacy reference data
    *directory_urls(),
    # Pages (guarded by the route guard middleware)
    re_path(r'^(?P<page>(?!api/)[A-Za-z0-9\-/]*)$', page_view, name='page'),
]
