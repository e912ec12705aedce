"""
Catalog tests: piece types, subtypes and pieces
"""
from decimal import Decimal
from django.test import TestCase, override_settings
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient, reset_state
from backend.catalog.storage import pieces, piece_subtypes
from backend.catalog.validators import apply_gallery_status, filter_available_for_order
from backend.events.storage import event_pieces
from backend.orders.storage import orders, order_items


class PieceTypeAPITests(TestCase):

    def setUp(self):
        reset_state()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def test_create_trims_and_rejects_duplicates(self):
        response = self.client.post('/api/piece-types', {'name': '  Vase  ', 'description': '  '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Vase')
        self.assertIsNone(response.data['description'])

        duplicate = self.client.post('/api/piece-types', {'name': 'Vase'}, format='json')
        self.assertEqual(duplicate.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(duplicate.data, {'error': 'Type name already exists'})

    def test_same_name_for_another_user_is_allowed(self):
        other = TestDataFactory.create_user()
        TestDataFactory.create_piece_type(other, name='Bowl')
        response = self.client.post('/api/piece-types', {'name': 'Bowl'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_list_filters(self):
        TestDataFactory.create_piece_type(self.user, name='Sculpture')
        TestDataFactory.create_piece_type(self.user, name='bowl')
        names = [row['name'] for row in self.client.get('/api/piece-types').data]
        self.assertEqual(names, ['bowl', 'Sculpture'])
        self.assertEqual(len(self.client.get('/api/piece-types', {'q': 'sculp'}).data), 1)

    def test_delete_removes_subtypes_and_detaches_pieces(self):
        piece_type = TestDataFactory.create_piece_type(self.user)
        subtype = TestDataFactory.create_piece_subtype(self.user, piece_type)
        piece = TestDataFactory.create_piece(self.user, piece_type_id=piece_type.id, piece_subtype_id=subtype.id)

        response = self.client.delete(f'/api/piece-types/{piece_type.id}')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertIsNone(piece_subtypes.find(self.user.id, subtype.id))
        piece = pieces.get_piece(self.user.id, piece.id)
        self.assertIsNone(piece.piece_type_id)
        self.assertIsNone(piece.piece_subtype_id)


class PieceSubtypeAPITests(TestCase):

    def setUp(self):
        reset_state()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)
        self.piece_type = TestDataFactory.create_piece_type(self.user)

    def test_create_requires_owned_type(self):
        other_type = TestDataFactory.create_piece_type(TestDataFactory.create_user())
        response = self.client.post('/api/piece-subtypes', {'piece_type_id': other_type.id, 'name': 'Tall'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_duplicate_per_type(self):
        data = {'piece_type_id': self.piece_type.id, 'name': 'Tall'}
        self.assertEqual(self.client.post('/api/piece-subtypes', data, format='json').status_code, status.HTTP_201_CREATED)
        self.assertEqual(self.client.post('/api/piece-subtypes', data, format='json').status_code, status.HTTP_409_CONFLICT)

        other_type = TestDataFactory.create_piece_type(self.user)
        again = self.client.post('/api/piece-subtypes', {'piece_type_id': other_type.id, 'name': 'Tall'}, format='json')
        self.assertEqual(again.status_code, status.HTTP_201_CREATED)

    def test_only_active_defaults_to_true(self):
        TestDataFactory.create_piece_subtype(self.user, self.piece_type, name='Active')
        retired = TestDataFactory.create_piece_subtype(self.user, self.piece_type, name='Retired')
        piece_subtypes.update_piece_subtype(self.user.id, retired.id, {'is_active': False})

        default = self.client.get('/api/piece-subtypes', {'piece_type_id': self.piece_type.id}).data
        self.assertEqual([row['name'] for row in default], ['Active'])
        everything = self.client.get('/api/piece-subtypes', {'only_active': 'false'}).data
        self.assertEqual(len(everything), 2)


class PieceAPITests(TestCase):
    """Piece CRUD, gallery placement and list filters"""

    def setUp(self):
        reset_state()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)
        self.gallery = TestDataFactory.create_gallery(self.user)

    def test_create_piece(self):
        data = {'name': 'Blue vase', 'unique_id': 'GL-001', 'price': '250.00', 'dominant_color': 'blue'}
        response = self.client.post('/api/pieces', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'workshop')
        self.assertEqual(response.data['current_location'], 'atelier')
        self.assertEqual(Decimal(response.data['price']), Decimal('250.00'))

    def test_unique_id_is_unique_per_user(self):
        TestDataFactory.create_piece(self.user, unique_id='GL-001')
        data = {'name': 'Copy', 'unique_id': 'GL-001', 'price': '10.00'}
        self.assertEqual(self.client.post('/api/pieces', data, format='json').status_code, status.HTTP_409_CONFLICT)

        other_client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.assertEqual(other_client.post('/api/pieces', data, format='json').status_code, status.HTTP_201_CREATED)

    def test_subtype_must_match_type(self):
        vase = TestDataFactory.create_piece_type(self.user, name='Vase')
        bowl = TestDataFactory.create_piece_type(self.user, name='Bowl')
        shallow = TestDataFactory.create_piece_subtype(self.user, bowl, name='Shallow')
        data = {'name': 'X', 'unique_id': 'GL-X', 'price': '10.00',
                'piece_type_id': vase.id, 'piece_subtype_id': shallow.id}
        response = self.client.post('/api/pieces', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_foreign_gallery_is_not_found(self):
        foreign = TestDataFactory.create_gallery(TestDataFactory.create_user())
        data = {'name': 'X', 'unique_id': 'GL-X', 'price': '10.00', 'gallery_id': foreign.id}
        self.assertEqual(self.client.post('/api/pieces', data, format='json').status_code, status.HTTP_404_NOT_FOUND)

    def test_patch_gallery_moves_status(self):
        piece = TestDataFactory.create_piece(self.user)
        placed = self.client.patch(f'/api/pieces/{piece.id}', {'gallery_id': self.gallery.id}, format='json')
        self.assertEqual(placed.data['status'], 'gallery')
        back = self.client.patch(f'/api/pieces/{piece.id}', {'gallery_id': None}, format='json')
        self.assertEqual(back.data['status'], 'workshop')

    def test_list_filters_and_search(self):
        TestDataFactory.create_piece(self.user, name='Red bowl', unique_id='RB-1')
        TestDataFactory.create_piece(self.user, name='Green vase', unique_id='GV-1', status='sold')
        self.assertEqual(len(self.client.get('/api/pieces', {'search': 'bowl'}).data), 1)
        self.assertEqual(len(self.client.get('/api/pieces', {'search': 'gv-'}).data), 1)
        self.assertEqual(len(self.client.get('/api/pieces', {'status': 'sold'}).data), 1)

        newest_first = [row['name'] for row in self.client.get('/api/pieces').data]
        self.assertEqual(newest_first, ['Green vase', 'Red bowl'])

    def test_paginated_list(self):
        for index in range(5):
            TestDataFactory.create_piece(self.user, unique_id=f'P-{index}')
        response = self.client.get('/api/pieces', {'paginated': 'true', 'page': 2, 'page_size': 2})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['items']), 2)
        self.assertEqual(response.data['pagination'], {'page': 2, 'page_size': 2, 'total': 5, 'total_pages': 3})

    def test_available_for_order(self):
        other_gallery = TestDataFactory.create_gallery(self.user)
        free = TestDataFactory.create_piece(self.user, unique_id='FREE')
        here = TestDataFactory.create_piece(self.user, unique_id='HERE', gallery_id=self.gallery.id)
        TestDataFactory.create_piece(self.user, unique_id='THERE', gallery_id=other_gallery.id)
        TestDataFactory.create_piece(self.user, unique_id='SOLD', status='sold')
        order = TestDataFactory.create_order(self.user, gallery=self.gallery)

        response = self.client.get('/api/pieces', {'available_for_order': 'true', 'order_id': order.id})
        self.assertEqual({row['id'] for row in response.data}, {free.id, here.id})

        missing = self.client.get('/api/pieces', {'available_for_order': 'true', 'order_id': 999})
        self.assertEqual(missing.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_cascades_to_order_items_and_event_pieces(self):
        piece = TestDataFactory.create_piece(self.user, price=Decimal('100.00'))
        keeper = TestDataFactory.create_piece(self.user, price=Decimal('40.00'))
        order = TestDataFactory.create_order(self.user)
        TestDataFactory.create_order_item(self.user, order, piece)
        TestDataFactory.create_order_item(self.user, order, keeper)
        event = TestDataFactory.create_event(self.user)
        TestDataFactory.add_event_piece(self.user, event, piece)

        response = self.client.delete(f'/api/pieces/{piece.id}')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(len(order_items.list_order_items(self.user.id, order_id=order.id)), 1)
        self.assertEqual(orders.get_order(self.user.id, order.id).total_amount, Decimal('40.00'))
        self.assertEqual(event_pieces.list_event_pieces(self.user.id, event.id), [])

    def test_invalid_query_param_is_400(self):
        response = self.client.get('/api/pieces', {'status': 'lost'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


@override_settings(STORAGE_USE_DATABASE=True)
class PieceTypeDatabaseTests(PieceTypeAPITests):
    pass


@override_settings(STORAGE_USE_DATABASE=True)
class PieceSubtypeDatabaseTests(PieceSubtypeAPITests):
    pass


@override_settings(STORAGE_USE_DATABASE=True)
class PieceDatabaseTests(PieceAPITests):
    pass


class ValidatorTests(TestCase):

    def test_apply_gallery_status(self):
        self.assertEqual(apply_gallery_status({'gallery_id': 3})['status'], 'gallery')
        self.assertEqual(apply_gallery_status({'gallery_id': None})['status'], 'workshop')
        self.assertEqual(apply_gallery_status({'gallery_id': 3, 'status': 'sold'})['status'], 'sold')
        self.assertNotIn('status', apply_gallery_status({'name': 'x'}))

    def test_filter_available_for_order(self):
        class Row:
            def __init__(self, status, gallery_id):
                self.status = status
                self.gallery_id = gallery_id

        rows = [Row('workshop', None), Row('gallery', 1), Row('gallery', 2), Row('sold', None)]
        self.assertEqual(len(filter_available_for_order(rows)), 3)
        self.assertEqual(len(filter_available_for_order(rows, 1)), 2)
