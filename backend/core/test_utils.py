"""
Test utilities and factories for creating test data

Business rows go through the storage singletons, so the same factory works
against the in-memory store and (under ``STORAGE_USE_DATABASE=True``) the
database. Users always live in the database.
"""
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient
from backend.core.storage import memory
from backend.galleries.storage import galleries
from backend.catalog.storage import piece_types, piece_subtypes, pieces
from backend.inventory.storage import stock_items, stock_movements
from backend.orders.storage import orders, order_items
from backend.events.storage import events, event_pieces
from decimal import Decimal
import random
import string

User = get_user_model()


def reset_state():
    """Empty the memory store and the throttle cache between tests"""
    memory.reset()
    cache.clear()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role='artisan'):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            first_name='Test',
            last_name='User',
            role=role,
        )

    @staticmethod
    def create_gallery(user, name=None, **extra):
        """Create a test gallery"""
        if not name:
            name = f'Gallery_{TestDataFactory.random_string(6)}'
        return galleries.create_gallery(user.id, dict({'name': name, 'city': 'Murano'}, **extra))

    @staticmethod
    def create_piece_type(user, name=None):
        if not name:
            name = f'Type_{TestDataFactory.random_string(6)}'
        return piece_types.create_piece_type(user.id, {'name': name})

    @staticmethod
    def create_piece_subtype(user, piece_type, name=None):
        if not name:
            name = f'Subtype_{TestDataFactory.random_string(6)}'
        return piece_subtypes.create_piece_subtype(user.id, {'piece_type_id': piece_type.id, 'name': name})

    @staticmethod
    def create_piece(user, name=None, unique_id=None, price=None, **extra):
        """Create a test piece"""
        if not name:
            name = f'Vase_{TestDataFactory.random_string(6)}'
        if not unique_id:
            unique_id = f'GL-{TestDataFactory.random_string(8).upper()}'
        if price is None:
            price = Decimal('120.00')
        data = dict({'name': name, 'unique_id': unique_id, 'price': price}, **extra)
        return pieces.create_piece(user.id, data)

    @staticmethod
    def create_stock_item(user, name=None, quantity=None, threshold=None, **extra):
        """Create a test stock item"""
        if not name:
            name = f'Frit_{TestDataFactory.random_string(6)}'
        data = {
            'name': name,
            'type': 'frit',
            'category': 'glass',
            'unit': 'kg',
            'current_quantity': quantity if quantity is not None else Decimal('10.00'),
            'minimum_threshold': threshold if threshold is not None else Decimal('2.00'),
        }
        data.update(extra)
        return stock_items.create_stock_item(user.id, data)

    @staticmethod
    def create_stock_movement(user, stock_item, type='in', quantity=None, reason='Test movement'):
        if quantity is None:
            quantity = Decimal('1.00')
        return stock_movements.create_stock_movement(user.id, {
            'stock_item_id': stock_item.id,
            'type': type,
            'quantity': quantity,
            'reason': reason,
        })

    @staticmethod
    def create_order(user, order_number=None, gallery=None, **extra):
        """Create a test order"""
        if not order_number:
            order_number = f'ORD-{TestDataFactory.random_string(6).upper()}'
        data = dict({'order_number': order_number, 'gallery_id': gallery.id if gallery else None}, **extra)
        return orders.create_order(user.id, data)

    @staticmethod
    def create_order_item(user, order, piece, price=None):
        data = {'order_id': order.id, 'piece_id': piece.id}
        if price is not None:
            data['price'] = price
        return order_items.create_order_item(user.id, data)

    @staticmethod
    def create_event(user, name=None, start_date=None, **extra):
        """Create a test event"""
        if not name:
            name = f'Fair_{TestDataFactory.random_string(6)}'
        if start_date is None:
            start_date = timezone.now()
        data = dict({'name': name, 'type': 'fair', 'start_date': start_date}, **extra)
        return events.create_event(user.id, data)

    @staticmethod
    def add_event_piece(user, event, piece, display_price=None, sold=False):
        return event_pieces.add_event_piece(user.id, event.id, piece.id, display_price=display_price, sold=sold)


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Open a session for the user"""
        self.force_login(user)
        return self
