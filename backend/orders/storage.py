"""
Orders and order items.

An order's ``total_amount`` is derived data: it is rewritten as the sum of
its item prices after every change to the order or to any of its items.
"""
import copy
import logging
from decimal import Decimal

from django.db.models import Sum
from django.utils import timezone

from backend.core.exceptions import BusinessRuleError
from backend.core.storage import StorageBase, memory
from .models import Order, OrderItem

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

STATUS_TIMESTAMPS = {
    'shipped': 'shipped_at',
    'delivered': 'delivered_at',
}


def stamp_status_dates(data, current=None):
    """Fill shipped_at/delivered_at the first time an order reaches that status."""
    field = STATUS_TIMESTAMPS.get(data.get('status'))
    if field is None or data.get(field) is not None:
        return data
    if current is not None and getattr(current, field) is not None:
        return data
    data = dict(data)
    data[field] = timezone.now()
    return data


class OrdersStorage(StorageBase):
    model = Order
    table_name = 'orders'
    label = 'Order'
    unique_fields = ('order_number',)
    duplicate_message = 'An order with this number already exists'

    def _check_gallery(self, user_id, data):
        from backend.galleries.storage import galleries
        gallery_id = data.get('gallery_id')
        if gallery_id is not None and not galleries.exists(user_id, gallery_id):
            raise galleries.not_found()

    def create_order(self, user_id, data):
        self._check_gallery(user_id, data)
        data = stamp_status_dates(data)
        data.pop('total_amount', None)
        with self.atomic():
            order = self.insert(user_id, data)
            self.recalc_order_total(user_id, order.id)
            return self.get(user_id, order.id)

    def list_orders(self, user_id, status=None, page=1, limit=DEFAULT_PAGE_SIZE):
        limit = max(1, min(limit or DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE))
        offset = (max(page, 1) - 1) * limit

        if self.use_database:
            queryset = self.queryset(user_id)
            if status:
                queryset = queryset.filter(status=status)
            return list(queryset.order_by('-created_at', '-id')[offset:offset + limit])

        rows = self.memory_rows(user_id)
        if status:
            rows = [row for row in rows if row.status == status]
        rows.sort(key=lambda row: (row.created_at, row.id), reverse=True)
        return [copy.copy(row) for row in rows[offset:offset + limit]]

    def get_order(self, user_id, pk):
        return self.get(user_id, pk)

    def update_order(self, user_id, pk, patch):
        patch = dict(patch)
        patch.pop('total_amount', None)
        self._check_gallery(user_id, patch)
        with self.atomic():
            current = self.get(user_id, pk)
            self.patch(user_id, pk, stamp_status_dates(patch, current))
            self.recalc_order_total(user_id, pk)
            return self.get(user_id, pk)

    def delete_order(self, user_id, pk):
        """Delete an order after its items."""
        with self.atomic():
            self.get(user_id, pk)
            if self.use_database:
                order_items.queryset(user_id).filter(order_id=pk).delete()
            else:
                order_items.memory_purge(user_id, 'order_id', pk)
            self.remove(user_id, pk)

    def recalc_order_total(self, user_id, order_id):
        """Write SUM(item prices) onto the order, 0 when it has no items."""
        if order_id is None:
            return None

        if self.use_database:
            total = (
                order_items.queryset(user_id).filter(order_id=order_id)
                .aggregate(total=Sum('price'))['total']
            )
            total = total if total is not None else Decimal('0.00')
            self.queryset(user_id).filter(pk=order_id).update(total_amount=total, updated_at=timezone.now())
        else:
            with memory.lock:
                total = sum(
                    (row.price for row in order_items.memory_rows(user_id) if row.order_id == order_id),
                    Decimal('0.00'),
                )
                row = self.memory_find(user_id, order_id)
                if row is not None:
                    updated = copy.copy(row)
                    updated.total_amount = total
                    self.touch(updated)
                    self.memory_replace(updated)

        logger.debug(f"Order {order_id} total recalculated to {total} for user {user_id}")
        return total


class OrderItemsStorage(StorageBase):
    model = OrderItem
    table_name = 'order_items'
    label = 'Order item'

    def _place_piece(self, user_id, order, piece):
        """
        Enforce that an order only carries pieces of its gallery. A piece
        with no gallery is moved into the order's gallery.
        """
        from backend.catalog.storage import pieces
        if not order.gallery_id:
            return piece
        if piece.gallery_id is not None and piece.gallery_id != order.gallery_id:
            raise BusinessRuleError('Piece is placed in another gallery than the order')
        if piece.gallery_id is None:
            piece = pieces.patch(user_id, piece.id, {'gallery_id': order.gallery_id, 'status': 'gallery'})
            logger.info(f"Piece {piece.id} linked to gallery {order.gallery_id} through order {order.id}")
        return piece

    def create_order_item(self, user_id, data):
        from backend.catalog.storage import pieces

        with self.atomic():
            order = orders.get_order(user_id, data.get('order_id'))
            piece_id = data.get('piece_id')
            if piece_id is None:
                raise BusinessRuleError('piece_id is required')
            piece = pieces.get_piece(user_id, piece_id)
            piece = self._place_piece(user_id, order, piece)

            price = data.get('price')
            if price is None:
                price = piece.price
            if price is None:
                raise BusinessRuleError('Price is required (the piece has no price)')

            item = self.insert(user_id, {'order_id': order.id, 'piece_id': piece.id, 'price': price})
            orders.recalc_order_total(user_id, order.id)
            return item

    def list_order_items(self, user_id, order_id=None):
        if self.use_database:
            queryset = self.queryset(user_id)
            if order_id is not None:
                queryset = queryset.filter(order_id=order_id)
            return list(queryset.order_by('-created_at', '-id'))

        rows = self.memory_rows(user_id)
        if order_id is not None:
            rows = [row for row in rows if row.order_id == order_id]
        rows.sort(key=lambda row: (row.created_at, row.id), reverse=True)
        return [copy.copy(row) for row in rows]

    def list_order_items_for_order(self, user_id, order_id):
        orders.get_order(user_id, order_id)
        return self.list_order_items(user_id, order_id=order_id)

    def get_order_item(self, user_id, pk):
        return self.get(user_id, pk)

    def update_order_item(self, user_id, pk, patch):
        from backend.catalog.storage import pieces

        with self.atomic():
            current = self.get(user_id, pk)
            if 'order_id' in patch or 'piece_id' in patch:
                order = orders.get_order(user_id, patch.get('order_id', current.order_id))
                piece = pieces.get_piece(user_id, patch.get('piece_id', current.piece_id))
                self._place_piece(user_id, order, piece)

            item = self.patch(user_id, pk, patch)
            for order_id in {current.order_id, item.order_id}:
                orders.recalc_order_total(user_id, order_id)
            return item

    def delete_order_item(self, user_id, pk):
        with self.atomic():
            item = self.get(user_id, pk)
            self.remove(user_id, pk)
            orders.recalc_order_total(user_id, item.order_id)


orders = OrdersStorage()
order_items = OrderItemsStorage()
