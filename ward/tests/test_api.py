"""
Integration tests for the ward API.

These tests drive the HTTP endpoints with DRF's APIClient: role based
access, the response envelope, error codes and the full delivery flow.
"""
from django.test import override_settings
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from ward.models import ActivityLog, LaborRoom, MessageTemplate, Patient, User
from ward.services import notifications


@override_settings(SMS_BACKEND='ward.services.notifications.LocmemSmsBackend')
class WardAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin_user = User.objects.create_user(
            username='admin@hospital.com', password='P@ssw0rd1', role=User.Role.ADMIN,
            first_name='Sarah', last_name='Admin',
        )
        self.front_desk = User.objects.create_user(
            username='frontdesk@hospital.com', password='P@ssw0rd1', role=User.Role.FRONT_DESK,
        )
        self.nurse = User.objects.create_user(
            username='nurse1@hospital.com', password='P@ssw0rd1', role=User.Role.LABOR_NURSE,
            first_name='Lisa', last_name='Brown',
        )
        self.room1 = LaborRoom.objects.create(name='Labor Room 1', assigned_nurse=self.nurse)
        self.room2 = LaborRoom.objects.create(name='Labor Room 2')
        self.template = MessageTemplate.objects.create(
            name='Simple', content='Good news! {{patientName}} had a {{babyGender}} baby.',
            created_by=self.admin_user,
        )
        notifications.outbox.clear()

    def authenticate(self, user: User) -> APIClient:
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    def register(self, name='Jane Doe') -> dict:
        r = self.authenticate(self.front_desk).post('/api/patients/register', {
            'fullName': name, 'nextOfKinName': 'John Doe', 'nextOfKinPhone': '555-1234',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        return r.data['data']

    def test_unauthenticated_requests_are_rejected(self):
        r = APIClient().get('/api/patients')
        self.assertEqual(r.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(r.data['ok'])

    def test_register_and_list(self):
        p = self.register()
        self.assertEqual(p['status'], 'registered')
        self.assertIsNone(p['assignedNurseId'])
        r = self.authenticate(self.nurse).get('/api/patients', {'status': 'registered'})
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertTrue(r.data['ok'])
        self.assertEqual([x['fullName'] for x in r.data['data']], ['Jane Doe'])

    def test_nurse_cannot_register(self):
        r = self.authenticate(self.nurse).post('/api/patients/register', {
            'fullName': 'Jane', 'nextOfKinName': 'John', 'nextOfKinPhone': '1',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)

    def test_front_desk_cannot_accept(self):
        p = self.register()
        r = self.authenticate(self.front_desk).post('/api/patients/accept', {'patientId': p['id']}, format='json')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)

    def test_register_blank_name_is_validation_error(self):
        r = self.authenticate(self.front_desk).post('/api/patients/register', {
            'fullName': '<b></b>', 'nextOfKinName': 'John', 'nextOfKinPhone': '1',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data['error']['code'], 'validation_error')

    def test_full_flow_through_the_api(self):
        p = self.register()
        nurse = self.authenticate(self.nurse)

        # no roomId: the nurse's own room is used
        r = nurse.post('/api/patients/accept', {'patientId': p['id']}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['data']['laborRoomId'], self.room1.id)

        r = nurse.get('/api/patients', {'nurse': 'me'})
        self.assertEqual([x['id'] for x in r.data['data']], [p['id']])

        r = nurse.post('/api/patients/complete-delivery', {
            'patientId': p['id'], 'babyGender': 'male', 'templateId': self.template.id,
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        data = r.data['data']
        self.assertEqual(data['message'], 'Good news! Jane Doe had a male baby.')
        self.assertEqual(data['patient']['status'], 'delivered')
        self.assertFalse(data['room']['isOccupied'])
        self.assertEqual(len(notifications.outbox), 1)
        self.assertEqual(notifications.outbox[0].phone, '555-1234')

    def test_occupied_room_is_conflict(self):
        first, second = self.register(), self.register('Ann Roe')
        nurse = self.authenticate(self.nurse)
        nurse.post('/api/patients/accept', {'patientId': first['id'], 'roomId': self.room2.id}, format='json')
        r = nurse.post('/api/patients/accept', {'patientId': second['id'], 'roomId': self.room2.id}, format='json')
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(r.data['error']['code'], 'room_unavailable')
        self.assertEqual(Patient.objects.get(id=second['id']).status, Patient.Status.REGISTERED)

    def test_complete_registered_patient_is_invalid_transition(self):
        p = self.register()
        r = self.authenticate(self.nurse).post('/api/patients/complete-delivery', {
            'patientId': p['id'], 'babyGender': 'female', 'templateId': self.template.id,
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(r.data['error']['code'], 'invalid_transition')

    def test_unknown_template_is_not_found(self):
        p = self.register()
        nurse = self.authenticate(self.nurse)
        nurse.post('/api/patients/accept', {'patientId': p['id']}, format='json')
        r = nurse.post('/api/patients/complete-delivery', {
            'patientId': p['id'], 'babyGender': 'female', 'templateId': 9999,
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(r.data['error']['code'], 'template_not_found')
        self.assertTrue(LaborRoom.objects.get(id=self.room1.id).is_occupied)
        self.assertEqual(notifications.outbox, [])

    def test_admin_must_name_the_nurse(self):
        p = self.register()
        admin = self.authenticate(self.admin_user)
        r = admin.post('/api/patients/accept', {'patientId': p['id'], 'roomId': self.room2.id}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        r = admin.post('/api/patients/accept', {
            'patientId': p['id'], 'roomId': self.room2.id, 'nurseId': self.nurse.id,
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['data']['assignedNurseId'], self.nurse.id)

    def test_room_admin(self):
        admin = self.authenticate(self.admin_user)
        r = admin.post('/api/rooms/create', {'name': 'Labor Room 3'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        room_id = r.data['data']['id']
        r = admin.post('/api/rooms/update', {'id': room_id, 'name': 'Suite', 'nurseId': self.nurse.id}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['data']['name'], 'Suite')
        self.assertEqual(r.data['data']['assignedNurseName'], 'Lisa Brown')
        r = admin.post('/api/rooms/update', {'id': room_id, 'nurseId': None}, format='json')
        self.assertIsNone(r.data['data']['assignedNurseId'])

        r = self.authenticate(self.nurse).post('/api/rooms/create', {'name': 'X'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        r = self.authenticate(self.nurse).get('/api/rooms', {'available': 'true'})
        self.assertEqual(len(r.data['data']), 3)

    def test_template_admin_and_preview(self):
        admin = self.authenticate(self.admin_user)
        r = admin.post('/api/templates/create', {'name': 'Full', 'content': 'Dear {{nextOfKinName}} {{foo}}'},
                       format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        tpl_id = r.data['data']['id']

        p = self.register()
        r = self.authenticate(self.nurse).post('/api/templates/preview', {
            'templateId': tpl_id, 'patientId': p['id'],
        }, format='json')
        self.assertEqual(r.data['data']['message'], 'Dear John Doe {{foo}}')

        r = admin.post('/api/templates/deactivate', {'id': tpl_id}, format='json')
        self.assertFalse(r.data['data']['isActive'])
        r = admin.get('/api/templates', {'active': 'true'})
        self.assertEqual([t['id'] for t in r.data['data']], [self.template.id])
        r = admin.post('/api/templates/update', {'id': 4040, 'name': 'x'}, format='json')
        self.assertEqual(r.data['error']['code'], 'template_not_found')

    def test_activity_newest_first_admin_only(self):
        self.register('First')
        self.register('Second')
        r = self.authenticate(self.admin_user).get('/api/activity')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        details = [a['details'] for a in r.data['data']]
        self.assertEqual(details, ['New patient Second registered', 'New patient First registered'])
        r = self.authenticate(self.front_desk).get('/api/activity')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)

    def test_dashboard(self):
        p = self.register()
        self.register('Ann Roe')
        self.authenticate(self.nurse).post('/api/patients/accept', {'patientId': p['id']}, format='json')
        r = self.authenticate(self.admin_user).get('/api/admin/dashboard')
        data = r.data['data']
        self.assertEqual(data['totalPatients'], 2)
        self.assertEqual(data['registered'], 1)
        self.assertEqual(data['inLabor'], 1)
        self.assertEqual(data['deliveredToday'], 0)
        self.assertEqual(data['occupiedRooms'], 1)
        self.assertEqual(data['availableRooms'], 1)
        self.assertEqual(len(data['recentActivities']), 3)

    def test_user_directory(self):
        admin = self.authenticate(self.admin_user)
        r = admin.post('/api/users/create', {
            'name': 'Nora Green', 'email': 'nora@hospital.com', 'role': 'labor_nurse', 'password': 'Ward-Duty-2024!',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        r = admin.post('/api/users/update', {'id': r.data['data']['id'], 'isActive': False}, format='json')
        self.assertFalse(r.data['data']['isActive'])
        r = admin.get('/api/users', {'role': 'labor_nurse'})
        self.assertEqual(len(r.data['data']), 2)
        self.assertEqual(ActivityLog.objects.filter(action=ActivityLog.Action.USER_CREATED).count(), 1)
