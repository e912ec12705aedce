"""
Events and the pieces shown at them
"""
from datetime import timedelta
from decimal import Decimal
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient, reset_state
from backend.events.storage import events, event_pieces


class EventAPITests(TestCase):

    def setUp(self):
        reset_state()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def test_create_event_with_dates(self):
        data = {'name': 'Murano Glass Fair', 'type': 'fair', 'venue': 'Venice',
                'start_date': '2026-05-01', 'end_date': '2026-05-03', 'participation_fee': '150.00'}
        response = self.client.post('/api/events', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'planned')
        self.assertTrue(response.data['start_date'].startswith('2026-05-01'))

    def test_end_before_start_is_rejected(self):
        data = {'name': 'Backwards', 'type': 'sale', 'start_date': '2026-05-03', 'end_date': '2026-05-01'}
        response = self.client.post('/api/events', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        event = TestDataFactory.create_event(self.user)
        earlier = (event.start_date - timedelta(days=2)).isoformat()
        patched = self.client.patch(f'/api/events/{event.id}', {'end_date': earlier}, format='json')
        self.assertEqual(patched.status_code, status.HTTP_400_BAD_REQUEST)

    def test_start_date_is_required(self):
        response = self.client.post('/api/events', {'name': 'No date', 'type': 'fair'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filters_and_order(self):
        now = timezone.now()
        TestDataFactory.create_event(self.user, name='Past fair', start_date=now - timedelta(days=30))
        TestDataFactory.create_event(self.user, name='Next workshop', type='workshop', start_date=now + timedelta(days=7))
        TestDataFactory.create_event(self.user, name='Cancelled sale', type='sale', status='cancelled', start_date=now)

        names = [row['name'] for row in self.client.get('/api/events').data]
        self.assertEqual(names, ['Next workshop', 'Cancelled sale', 'Past fair'])

        self.assertEqual(len(self.client.get('/api/events', {'type': 'workshop'}).data), 1)
        self.assertEqual(len(self.client.get('/api/events', {'status': 'cancelled'}).data), 1)
        self.assertEqual(len(self.client.get('/api/events', {'q': 'FAIR'}).data), 1)

        window = {'from': (now - timedelta(days=1)).date().isoformat(), 'to': (now + timedelta(days=1)).date().isoformat()}
        self.assertEqual([row['name'] for row in self.client.get('/api/events', window).data], ['Cancelled sale'])

    def test_delete_removes_event_pieces(self):
        event = TestDataFactory.create_event(self.user)
        entry = TestDataFactory.add_event_piece(self.user, event, TestDataFactory.create_piece(self.user))
        self.assertEqual(self.client.delete(f'/api/events/{event.id}').status_code, status.HTTP_204_NO_CONTENT)
        self.assertIsNone(event_pieces.find(self.user.id, entry.id))
        self.assertEqual(self.client.get(f'/api/events/{event.id}').status_code, status.HTTP_404_NOT_FOUND)

    def test_events_are_scoped_to_owner(self):
        event = TestDataFactory.create_event(TestDataFactory.create_user())
        self.assertEqual(self.client.get(f'/api/events/{event.id}').status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.get(f'/api/events/{event.id}/pieces').status_code, status.HTTP_404_NOT_FOUND)


class EventPieceAPITests(TestCase):
    """Pieces attached to events"""

    def setUp(self):
        reset_state()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)
        self.event = TestDataFactory.create_event(self.user)
        self.piece = TestDataFactory.create_piece(self.user, name='Amber bowl', unique_id='AB-1',
                                                  price=Decimal('80.00'), image_url='/img/ab-1.jpg')

    def test_add_and_list_with_piece_details(self):
        response = self.client.post(f'/api/events/{self.event.id}/pieces',
                                    {'piece_id': self.piece.id, 'display_price': '95.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['sold'])

        rows = self.client.get(f'/api/events/{self.event.id}/pieces').data
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]['piece_name'], 'Amber bowl')
        self.assertEqual(rows[0]['piece_unique_id'], 'AB-1')
        self.assertEqual(rows[0]['piece_status'], 'workshop')
        self.assertEqual(Decimal(rows[0]['piece_price']), Decimal('80.00'))
        self.assertEqual(rows[0]['piece_image_url'], '/img/ab-1.jpg')
        self.assertEqual(Decimal(rows[0]['display_price']), Decimal('95.00'))

    def test_duplicate_piece_is_conflict(self):
        self.client.post(f'/api/events/{self.event.id}/pieces', {'piece_id': self.piece.id}, format='json')
        again = self.client.post(f'/api/events/{self.event.id}/pieces', {'piece_id': self.piece.id}, format='json')
        self.assertEqual(again.status_code, status.HTTP_409_CONFLICT)

    def test_missing_event_or_piece_is_404(self):
        self.assertEqual(self.client.post('/api/events/999/pieces', {'piece_id': self.piece.id}, format='json').status_code,
                         status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.post(f'/api/events/{self.event.id}/pieces', {'piece_id': 999}, format='json').status_code,
                         status.HTTP_404_NOT_FOUND)

    def test_update_and_delete_entry(self):
        entry = TestDataFactory.add_event_piece(self.user, self.event, self.piece)
        response = self.client.patch(f'/api/event-pieces/{entry.id}', {'sold': True, 'display_price': '70.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['sold'])

        self.assertEqual(self.client.delete(f'/api/event-pieces/{entry.id}').status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(self.client.delete(f'/api/event-pieces/{entry.id}').status_code, status.HTTP_404_NOT_FOUND)

    def test_patch_with_pieces_replaces_the_set(self):
        TestDataFactory.add_event_piece(self.user, self.event, self.piece)
        first = TestDataFactory.create_piece(self.user)
        second = TestDataFactory.create_piece(self.user)

        payload = {
            'status': 'confirmed',
            'pieces': [
                {'piece_id': first.id, 'display_price': '50.00'},
                {'piece_id': second.id, 'sold': True},
            ],
        }
        response = self.client.patch(f'/api/events/{self.event.id}', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'confirmed')
        self.assertNotIn('pieces', response.data)

        rows = event_pieces.list_event_pieces(self.user.id, self.event.id)
        self.assertEqual({row.piece_id for row in rows}, {first.id, second.id})
        self.assertEqual({row.piece_id: row.sold for row in rows}, {first.id: False, second.id: True})

    def test_replacing_with_unknown_piece_changes_nothing(self):
        TestDataFactory.add_event_piece(self.user, self.event, self.piece)
        payload = {'name': 'Renamed', 'pieces': [{'piece_id': 999}]}
        response = self.client.patch(f'/api/events/{self.event.id}', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(events.get_event(self.user.id, self.event.id).name, self.event.name)
        self.assertEqual(len(event_pieces.list_event_pieces(self.user.id, self.event.id)), 1)

    def test_replacing_with_repeated_piece_is_conflict(self):
        payload = {'pieces': [{'piece_id': self.piece.id}, {'piece_id': self.piece.id}]}
        response = self.client.patch(f'/api/events/{self.event.id}', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_empty_pieces_list_clears_the_set(self):
        TestDataFactory.add_event_piece(self.user, self.event, self.piece)
        response = self.client.patch(f'/api/events/{self.event.id}', {'pieces': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(event_pieces.list_event_pieces(self.user.id, self.event.id), [])


@override_settings(STORAGE_USE_DATABASE=True)
class EventDatabaseTests(EventAPITests):
    pass


@override_settings(STORAGE_USE_DATABASE=True)
class EventPieceDatabaseTests(EventPieceAPITests):
    pass
