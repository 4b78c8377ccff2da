import pytest
from django.core.cache import cache

from ward.models import LaborRoom, MessageTemplate, User
from ward.services import notifications


@pytest.fixture(autouse=True)
def _isolate(settings):
    """Fresh throttle counters and an in-memory SMS outbox for every test."""
    settings.SMS_BACKEND = 'ward.services.notifications.LocmemSmsBackend'
    cache.clear()
    notifications.outbox.clear()
    yield
    notifications.outbox.clear()


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        username='admin@hospital.com', password='P@ssw0rd1', role=User.Role.ADMIN,
        first_name='Sarah', last_name='Admin',
    )


@pytest.fixture
def front_desk(db):
    return User.objects.create_user(
        username='frontdesk@hospital.com', password='P@ssw0rd1', role=User.Role.FRONT_DESK,
        first_name='Mary', last_name='Johnson',
    )


@pytest.fixture
def nurse(db):
    return User.objects.create_user(
        username='nurse1@hospital.com', password='P@ssw0rd1', role=User.Role.LABOR_NURSE,
        first_name='Lisa', last_name='Brown',
    )


@pytest.fixture
def other_nurse(db):
    return User.objects.create_user(
        username='nurse2@hospital.com', password='P@ssw0rd1', role=User.Role.LABOR_NURSE,
        first_name='Carol', last_name='White',
    )


@pytest.fixture
def room(db):
    return LaborRoom.objects.create(name='Room 2')


@pytest.fixture
def template(admin_user):
    return MessageTemplate.objects.create(
        name='Next of kin',
        content='Hello {{nextOfKinName}}, {{patientName}} delivered a {{babyGender}} baby at {{deliveryTime}}.',
        created_by=admin_user,
    )
