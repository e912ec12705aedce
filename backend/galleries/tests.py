"""
Gallery API tests against the memory store and the database
"""
from django.test import TestCase, override_settings
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient, reset_state
from backend.catalog.storage import pieces
from backend.orders.storage import orders


class GalleryAPITests(TestCase):
    """Gallery CRUD, filtering and owner scoping"""

    def setUp(self):
        reset_state()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def test_create_and_get(self):
        response = self.client.post('/api/galleries', {'name': 'Vetro Vivo', 'commission_rate': '30.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user_id'], self.user.id)
        self.assertTrue(response.data['is_active'])

        detail = self.client.get(f"/api/galleries/{response.data['id']}")
        self.assertEqual(detail.status_code, status.HTTP_200_OK)
        self.assertEqual(detail.data['name'], 'Vetro Vivo')

    def test_create_requires_name(self):
        response = self.client.post('/api/galleries', {'city': 'Venice'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_is_ordered_by_name_and_filtered(self):
        TestDataFactory.create_gallery(self.user, name='zeta')
        TestDataFactory.create_gallery(self.user, name='Alpha')
        TestDataFactory.create_gallery(self.user, name='Closed', is_active=False)

        names = [row['name'] for row in self.client.get('/api/galleries').data]
        self.assertEqual(names, ['Alpha', 'Closed', 'zeta'])

        active = self.client.get('/api/galleries', {'is_active': 'true'}).data
        self.assertEqual([row['name'] for row in active], ['Alpha', 'zeta'])

        searched = self.client.get('/api/galleries', {'q': 'ZET'}).data
        self.assertEqual([row['name'] for row in searched], ['zeta'])

    def test_patch_bumps_updated_at(self):
        gallery = TestDataFactory.create_gallery(self.user, name='Old')
        response = self.client.patch(f'/api/galleries/{gallery.id}', {'name': 'New'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'New')
        self.assertGreaterEqual(response.data['updated_at'], response.data['created_at'])

    def test_other_users_gallery_is_not_found(self):
        other = TestDataFactory.create_user()
        gallery = TestDataFactory.create_gallery(other)
        self.assertEqual(self.client.get(f'/api/galleries/{gallery.id}').status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.delete(f'/api/galleries/{gallery.id}').status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.get('/api/galleries').data, [])

    def test_delete_detaches_pieces_and_orders(self):
        gallery = TestDataFactory.create_gallery(self.user)
        piece = TestDataFactory.create_piece(self.user, gallery_id=gallery.id, status='gallery')
        order = TestDataFactory.create_order(self.user, gallery=gallery)

        response = self.client.delete(f'/api/galleries/{gallery.id}')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertIsNone(pieces.get_piece(self.user.id, piece.id).gallery_id)
        self.assertIsNone(orders.get_order(self.user.id, order.id).gallery_id)
        self.assertEqual(self.client.get(f'/api/galleries/{gallery.id}').status_code, status.HTTP_404_NOT_FOUND)

    def test_missing_gallery_error_envelope(self):
        response = self.client.get('/api/galleries/999')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'error': 'Gallery not found'})


@override_settings(STORAGE_USE_DATABASE=True)
class GalleryDatabaseTests(GalleryAPITests):
    """Same scenarios with rows stored in the database"""
