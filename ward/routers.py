"""
URL mappings for the ward API.

Paths have no trailing slash; actions that change state are POSTs to a
verb-named path rather than REST resources.
"""
from django.urls import include, path

from .auth_views import jwt_logout_view, jwt_refresh_view, login_view, me_view
from .views import activity, dashboard, health, patients, rooms, templates, users

urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view),
    path('api/auth/logout', jwt_logout_view),
    path('api/auth/me', me_view),
    # Patients
    path('api/patients', patients.list_patients),
    path('api/patients/register', patients.register_patient),
    path('api/patients/accept', patients.accept_patient),
    path('api/patients/complete-delivery', patients.complete_delivery),
    # Labor rooms
    path('api/rooms', rooms.list_rooms),
    path('api/rooms/create', rooms.create_room),
    path('api/rooms/update', rooms.update_room),
    # Message templates
    path('api/templates', templates.list_templates),
    path('api/templates/create', templates.create_template),
    path('api/templates/update', templates.update_template),
    path('api/templates/deactivate', templates.deactivate_template),
    path('api/templates/preview', templates.preview_template),
    # Administration
    path('api/activity', activity.list_activity),
    path('api/admin/dashboard', dashboard.admin_dashboard),
    path('api/users', users.list_users),
    path('api/users/create', users.create_user),
    path('api/users/update', users.update_user),
]
