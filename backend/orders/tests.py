"""
Orders and order items: totals, gallery rules and status timestamps
"""
from decimal import Decimal
from django.test import TestCase, override_settings
from rest_framework import status
from backend.core.exceptions import BusinessRuleError, NotFoundError
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient, reset_state
from backend.catalog.storage import pieces
from backend.orders.storage import orders, order_items


class OrderTotalTests(TestCase):
    """total_amount always equals the sum of the order's item prices"""

    def setUp(self):
        reset_state()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)
        self.order = TestDataFactory.create_order(self.user)
        self.vase = TestDataFactory.create_piece(self.user, price=Decimal('100.00'))
        self.bowl = TestDataFactory.create_piece(self.user, price=Decimal('35.50'))

    def total(self, order=None):
        return orders.get_order(self.user.id, (order or self.order).id).total_amount

    def test_new_order_totals_zero(self):
        self.assertEqual(self.total(), Decimal('0.00'))

    def test_add_update_remove_items(self):
        response = self.client.post(f'/api/orders/{self.order.id}/items', {'piece_id': self.vase.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['price']), Decimal('100.00'))
        self.assertEqual(self.total(), Decimal('100.00'))

        second = self.client.post('/api/order-items',
                                  {'order_id': self.order.id, 'piece_id': self.bowl.id, 'price': '40.00'},
                                  format='json')
        self.assertEqual(second.status_code, status.HTTP_201_CREATED)
        self.assertEqual(self.total(), Decimal('140.00'))

        self.client.patch(f"/api/order-items/{second.data['id']}", {'price': '20.00'}, format='json')
        self.assertEqual(self.total(), Decimal('120.00'))

        self.client.delete(f"/api/order-items/{response.data['id']}")
        self.assertEqual(self.total(), Decimal('20.00'))
        self.assertTrue(AuditLog.objects.filter(action='order_total').exists())

    def test_moving_item_retotals_both_orders(self):
        target = TestDataFactory.create_order(self.user)
        item = TestDataFactory.create_order_item(self.user, self.order, self.vase)
        TestDataFactory.create_order_item(self.user, self.order, self.bowl)

        response = self.client.patch(f'/api/order-items/{item.id}', {'order_id': target.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.total(), Decimal('35.50'))
        self.assertEqual(self.total(target), Decimal('100.00'))

    def test_total_amount_is_not_client_writable(self):
        TestDataFactory.create_order_item(self.user, self.order, self.vase)
        response = self.client.patch(f'/api/orders/{self.order.id}', {'total_amount': '1.00', 'notes': 'rush'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['total_amount']), Decimal('100.00'))

        created = self.client.post('/api/orders', {'order_number': 'ORD-X', 'total_amount': '999'}, format='json')
        self.assertEqual(Decimal(created.data['total_amount']), Decimal('0.00'))

    def test_recalc_matches_items_after_direct_writes(self):
        TestDataFactory.create_order_item(self.user, self.order, self.vase, price=Decimal('10.00'))
        TestDataFactory.create_order_item(self.user, self.order, self.bowl, price=Decimal('0.25'))
        self.assertEqual(orders.recalc_order_total(self.user.id, self.order.id), Decimal('10.25'))
        items = order_items.list_order_items_for_order(self.user.id, self.order.id)
        self.assertEqual(sum(item.price for item in items), self.total())

    def test_deleting_order_removes_items(self):
        item = TestDataFactory.create_order_item(self.user, self.order, self.vase)
        response = self.client.delete(f'/api/orders/{self.order.id}')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertIsNone(order_items.find(self.user.id, item.id))
        self.assertEqual(self.client.get(f'/api/orders/{self.order.id}/items').status_code, status.HTTP_404_NOT_FOUND)


class OrderItemRuleTests(TestCase):
    """Gallery and price rules for order items"""

    def setUp(self):
        reset_state()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)
        self.gallery = TestDataFactory.create_gallery(self.user)
        self.order = TestDataFactory.create_order(self.user, gallery=self.gallery)

    def test_unplaced_piece_joins_order_gallery(self):
        piece = TestDataFactory.create_piece(self.user)
        response = self.client.post(f'/api/orders/{self.order.id}/items', {'piece_id': piece.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        piece = pieces.get_piece(self.user.id, piece.id)
        self.assertEqual(piece.gallery_id, self.gallery.id)
        self.assertEqual(piece.status, 'gallery')

    def test_piece_in_other_gallery_is_rejected(self):
        elsewhere = TestDataFactory.create_gallery(self.user)
        piece = TestDataFactory.create_piece(self.user, gallery_id=elsewhere.id)
        response = self.client.post(f'/api/orders/{self.order.id}/items', {'piece_id': piece.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.client.get(f'/api/orders/{self.order.id}/items').data, [])

    def test_piece_id_is_required(self):
        with self.assertRaises(BusinessRuleError):
            order_items.create_order_item(self.user.id, {'order_id': self.order.id})
        response = self.client.post(f'/api/orders/{self.order.id}/items', {'price': '5.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_missing_order_or_piece_is_404(self):
        piece = TestDataFactory.create_piece(self.user)
        self.assertEqual(self.client.post('/api/orders/999/items', {'piece_id': piece.id}, format='json').status_code,
                         status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.post(f'/api/orders/{self.order.id}/items', {'piece_id': 999}, format='json').status_code,
                         status.HTTP_404_NOT_FOUND)

    def test_other_users_piece_is_404(self):
        foreign = TestDataFactory.create_piece(TestDataFactory.create_user())
        with self.assertRaises(NotFoundError):
            order_items.create_order_item(self.user.id, {'order_id': self.order.id, 'piece_id': foreign.id})

    def test_item_list_is_newest_first(self):
        first = TestDataFactory.create_order_item(self.user, self.order, TestDataFactory.create_piece(self.user))
        second = TestDataFactory.create_order_item(self.user, self.order, TestDataFactory.create_piece(self.user))
        rows = self.client.get('/api/order-items', {'order_id': self.order.id}).data
        self.assertEqual([row['id'] for row in rows], [second.id, first.id])


class OrderAPITests(TestCase):

    def setUp(self):
        reset_state()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def test_create_trims_number_and_rejects_duplicates(self):
        response = self.client.post('/api/orders', {'order_number': '  ORD-1 '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['order_number'], 'ORD-1')
        self.assertEqual(response.data['status'], 'pending')

        duplicate = self.client.post('/api/orders', {'order_number': 'ORD-1'}, format='json')
        self.assertEqual(duplicate.status_code, status.HTTP_409_CONFLICT)

    def test_foreign_gallery_is_404(self):
        foreign = TestDataFactory.create_gallery(TestDataFactory.create_user())
        response = self.client.post('/api/orders', {'order_number': 'ORD-1', 'gallery_id': foreign.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_status_changes_stamp_dates(self):
        order = TestDataFactory.create_order(self.user)
        shipped = self.client.patch(f'/api/orders/{order.id}', {'status': 'shipped'}, format='json').data
        self.assertIsNotNone(shipped['shipped_at'])
        self.assertIsNone(shipped['delivered_at'])

        delivered = self.client.patch(f'/api/orders/{order.id}', {'status': 'delivered'}, format='json').data
        self.assertEqual(delivered['shipped_at'], shipped['shipped_at'])
        self.assertIsNotNone(delivered['delivered_at'])

    def test_list_filters_pages_and_caps_limit(self):
        for index in range(3):
            TestDataFactory.create_order(self.user, order_number=f'ORD-{index}')
        TestDataFactory.create_order(self.user, order_number='ORD-C', status='cancelled')

        newest_first = [row['order_number'] for row in self.client.get('/api/orders').data]
        self.assertEqual(newest_first, ['ORD-C', 'ORD-2', 'ORD-1', 'ORD-0'])

        page = self.client.get('/api/orders', {'page': 2, 'limit': 3}).data
        self.assertEqual([row['order_number'] for row in page], ['ORD-0'])

        cancelled = self.client.get('/api/orders', {'status': 'cancelled'}).data
        self.assertEqual(len(cancelled), 1)

        self.assertEqual(len(orders.list_orders(self.user.id, limit=1000)), 4)

    def test_orders_are_scoped_to_owner(self):
        order = TestDataFactory.create_order(TestDataFactory.create_user())
        self.assertEqual(self.client.get(f'/api/orders/{order.id}').status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.patch(f'/api/orders/{order.id}', {'notes': 'x'}, format='json').status_code,
                         status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.get('/api/orders').data, [])


@override_settings(STORAGE_USE_DATABASE=True)
class OrderTotalDatabaseTests(OrderTotalTests):
    pass


@override_settings(STORAGE_USE_DATABASE=True)
class OrderItemRuleDatabaseTests(OrderItemRuleTests):
    pass


@override_settings(STORAGE_USE_DATABASE=True)
class OrderDatabaseTests(OrderAPITests):
    pass
