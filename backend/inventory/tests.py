"""
Stock item and stock movement tests

Covers quantity bookkeeping on create/update/delete of movements and the
rule that no item may drop below zero.
"""
from datetime import timedelta
from decimal import Decimal
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from backend.core.exceptions import InsufficientStockError
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient, reset_state
from backend.inventory.models import signed_delta
from backend.inventory.storage import stock_items, stock_movements


class StockItemAPITests(TestCase):

    def setUp(self):
        reset_state()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def test_create_item(self):
        data = {'name': 'Clear frit', 'type': 'frit', 'category': 'glass', 'unit': 'kg',
                'current_quantity': '5.00', 'minimum_threshold': '2.00'}
        response = self.client.post('/api/stock/items', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['is_low'])

        duplicate = self.client.post('/api/stock/items', data, format='json')
        self.assertEqual(duplicate.status_code, status.HTTP_409_CONFLICT)

    def test_invalid_category_is_400(self):
        data = {'name': 'X', 'type': 'frit', 'category': 'metal', 'unit': 'kg'}
        self.assertEqual(self.client.post('/api/stock/items', data, format='json').status_code,
                         status.HTTP_400_BAD_REQUEST)

    def test_low_only_filter(self):
        TestDataFactory.create_stock_item(self.user, name='Plenty', quantity=Decimal('10'), threshold=Decimal('2'))
        TestDataFactory.create_stock_item(self.user, name='Edge', quantity=Decimal('2'), threshold=Decimal('2'))
        TestDataFactory.create_stock_item(self.user, name='Boxes', quantity=Decimal('0'), category='packaging', unit='units')

        low = self.client.get('/api/stock/items', {'low_only': 'true'}).data
        self.assertEqual([row['name'] for row in low], ['Boxes', 'Edge'])
        packaging = self.client.get('/api/stock/items', {'category': 'packaging'}).data
        self.assertEqual([row['name'] for row in packaging], ['Boxes'])

    def test_delete_keeps_movements_detached(self):
        item = TestDataFactory.create_stock_item(self.user)
        movement = TestDataFactory.create_stock_movement(self.user, item)

        self.assertEqual(self.client.delete(f'/api/stock/items/{item.id}').status_code, status.HTTP_204_NO_CONTENT)
        self.assertIsNone(stock_movements.get_stock_movement(self.user.id, movement.id).stock_item_id)


class StockMovementAPITests(TestCase):
    """Movements apply signed deltas to the item's current quantity"""

    def setUp(self):
        reset_state()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)
        self.item = TestDataFactory.create_stock_item(self.user, quantity=Decimal('10.00'))

    def quantity(self, item=None):
        return stock_items.get_stock_item(self.user.id, (item or self.item).id).current_quantity

    def post_movement(self, type, quantity, item=None):
        data = {'stock_item_id': (item or self.item).id, 'type': type, 'quantity': quantity, 'reason': 'test'}
        return self.client.post('/api/stock/movements', data, format='json')

    def test_in_and_out_adjust_quantity(self):
        self.assertEqual(self.post_movement('in', '5.00').status_code, status.HTTP_201_CREATED)
        self.assertEqual(self.quantity(), Decimal('15.00'))
        self.assertEqual(self.post_movement('out', '15.00').status_code, status.HTTP_201_CREATED)
        self.assertEqual(self.quantity(), Decimal('0.00'))
        self.assertTrue(AuditLog.objects.filter(action='stock_out').exists())

    def test_out_beyond_stock_is_rejected(self):
        response = self.post_movement('out', '10.01')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Insufficient stock', response.data['error'])
        self.assertEqual(self.quantity(), Decimal('10.00'))
        self.assertEqual(stock_movements.list_stock_movements(self.user.id), [])

    def test_quantity_must_be_positive(self):
        self.assertEqual(self.post_movement('in', '0').status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.post_movement('in', '-3').status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_item_is_404(self):
        data = {'stock_item_id': 999, 'type': 'in', 'quantity': '1.00', 'reason': 'x'}
        self.assertEqual(self.client.post('/api/stock/movements', data, format='json').status_code,
                         status.HTTP_404_NOT_FOUND)

    def test_update_rebalances(self):
        movement = self.post_movement('in', '5.00').data
        response = self.client.patch(f"/api/stock/movements/{movement['id']}", {'quantity': '2.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.quantity(), Decimal('12.00'))

        self.client.patch(f"/api/stock/movements/{movement['id']}", {'type': 'out'}, format='json')
        self.assertEqual(self.quantity(), Decimal('8.00'))

    def test_update_moving_to_another_item(self):
        other = TestDataFactory.create_stock_item(self.user, quantity=Decimal('1.00'))
        movement = self.post_movement('in', '4.00').data
        response = self.client.patch(f"/api/stock/movements/{movement['id']}", {'stock_item_id': other.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.quantity(), Decimal('10.00'))
        self.assertEqual(self.quantity(other), Decimal('5.00'))

    def test_update_that_would_go_negative_is_rejected(self):
        movement = self.post_movement('in', '5.00').data
        self.post_movement('out', '14.00')
        response = self.client.patch(f"/api/stock/movements/{movement['id']}", {'quantity': '1.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.quantity(), Decimal('1.00'))

    def test_update_rejects_negative_revert(self):
        movement = self.post_movement('in', '5.00').data
        self.post_movement('out', '14.00')
        response = self.client.patch(f"/api/stock/movements/{movement['id']}", {'notes': 'n'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.quantity(), Decimal('1.00'))
        self.assertIsNone(stock_movements.get_stock_movement(self.user.id, movement['id']).notes)

    def test_detached_movement_can_still_be_edited(self):
        movement = self.post_movement('in', '1.00').data
        self.assertEqual(self.client.delete(f'/api/stock/items/{self.item.id}').status_code,
                         status.HTTP_204_NO_CONTENT)

        response = self.client.patch(f"/api/stock/movements/{movement['id']}", {'reason': 'fixed typo'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['reason'], 'fixed typo')
        self.assertIsNone(stock_movements.get_stock_movement(self.user.id, movement['id']).stock_item_id)

    def test_detached_movement_can_be_reattached(self):
        other = TestDataFactory.create_stock_item(self.user, quantity=Decimal('2.00'))
        movement = self.post_movement('out', '3.00').data
        self.client.delete(f'/api/stock/items/{self.item.id}')

        response = self.client.patch(f"/api/stock/movements/{movement['id']}",
                                     {'stock_item_id': other.id, 'quantity': '2.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.quantity(other), Decimal('0.00'))

    def test_delete_reverts(self):
        movement = self.post_movement('out', '4.00').data
        self.assertEqual(self.quantity(), Decimal('6.00'))
        response = self.client.delete(f"/api/stock/movements/{movement['id']}")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(self.quantity(), Decimal('10.00'))

    def test_delete_that_would_go_negative_is_rejected(self):
        incoming = self.post_movement('in', '5.00').data
        self.post_movement('out', '12.00')
        response = self.client.delete(f"/api/stock/movements/{incoming['id']}")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.quantity(), Decimal('3.00'))
        self.assertEqual(len(stock_movements.list_stock_movements(self.user.id)), 2)

    def test_list_returns_latest_oldest_first(self):
        for quantity in ('1.00', '2.00', '3.00'):
            self.post_movement('in', quantity)
        rows = self.client.get('/api/stock/movements', {'limit': 2}).data
        self.assertEqual([row['quantity'] for row in rows], ['2.00', '3.00'])

    def test_list_date_bounds(self):
        self.post_movement('in', '1.00')
        today = timezone.localdate()
        self.assertEqual(len(self.client.get('/api/stock/movements', {'from': today.isoformat()}).data), 1)
        tomorrow = (today + timedelta(days=1)).isoformat()
        self.assertEqual(self.client.get('/api/stock/movements', {'from': tomorrow}).data, [])
        self.assertEqual(self.client.get('/api/stock/movements', {'from': 'soon'}).status_code,
                         status.HTTP_400_BAD_REQUEST)

    def test_movements_are_scoped_to_owner(self):
        movement = self.post_movement('in', '1.00').data
        other_client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.assertEqual(other_client.get(f"/api/stock/movements/{movement['id']}").status_code,
                         status.HTTP_404_NOT_FOUND)
        response = other_client.post('/api/stock/movements',
                                     {'stock_item_id': self.item.id, 'type': 'in', 'quantity': '1', 'reason': 'x'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


@override_settings(STORAGE_USE_DATABASE=True)
class StockItemDatabaseTests(StockItemAPITests):
    pass


@override_settings(STORAGE_USE_DATABASE=True)
class StockMovementDatabaseTests(StockMovementAPITests):
    pass


class SignedDeltaTests(TestCase):

    def test_signed_delta(self):
        self.assertEqual(signed_delta('in', Decimal('2')), Decimal('2'))
        self.assertEqual(signed_delta('out', Decimal('2')), Decimal('-2'))

    def test_storage_raises_domain_error(self):
        reset_state()
        user = TestDataFactory.create_user()
        item = TestDataFactory.create_stock_item(user, quantity=Decimal('1'))
        with self.assertRaises(InsufficientStockError):
            TestDataFactory.create_stock_movement(user, item, type='out', quantity=Decimal('2'))
