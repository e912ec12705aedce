"""
Stock items and the movements that change their quantity.

A movement carries a signed delta (+quantity for 'in', -quantity for 'out').
Creating, editing or deleting a movement applies or reverts that delta on
its stock item, and no step may leave an item below zero. The database
branch locks the touched rows inside one transaction. The memory branch
works on copies and swaps them in only after every check has passed.
"""
import copy
import logging

from django.db import transaction
from django.db.models.functions import Lower

from backend.core.exceptions import InsufficientStockError
from backend.core.storage import StorageBase, memory
from .filters import StockItemFilter, StockMovementFilter
from .models import StockItem, StockMovement, signed_delta

logger = logging.getLogger(__name__)

DEFAULT_MOVEMENT_LIMIT = 100
MAX_MOVEMENT_LIMIT = 1000


def shift_quantity(item, delta):
    """Add ``delta`` to ``item.current_quantity`` in place, refusing negatives."""
    new_quantity = item.current_quantity + delta
    if new_quantity < 0:
        raise InsufficientStockError(
            f"Insufficient stock for '{item.name}': {item.current_quantity} {item.unit} available"
        )
    item.current_quantity = new_quantity
    return item


def rebalance(items, old_item_id, old_delta, new_item_id, new_delta):
    """
    Revert ``old_delta`` on the old item, then apply ``new_delta`` on the new
    one. ``items`` maps id -> stock item and is mutated in place. Each step
    must leave its item non-negative. A missing old item is skipped; a
    ``None`` new item applies nothing.
    """
    if new_item_id is not None and new_item_id not in items:
        raise stock_items.not_found()
    if old_item_id is not None and old_item_id in items:
        shift_quantity(items[old_item_id], -old_delta)
    if new_item_id is not None:
        shift_quantity(items[new_item_id], new_delta)


class StockItemsStorage(StorageBase):
    model = StockItem
    table_name = 'stock_items'
    label = 'Stock item'
    unique_fields = ('name',)
    duplicate_message = 'A stock item with this name already exists'

    def create_stock_item(self, user_id, data):
        return self.insert(user_id, data)

    def list_stock_items(self, user_id, type=None, category=None, q=None, low_only=False):
        if self.use_database:
            params = {'type': type, 'category': category, 'q': q, 'low_only': low_only}
            params = {key: value for key, value in params.items() if value is not None}
            queryset = StockItemFilter(params, queryset=self.queryset(user_id)).qs
            return list(queryset.order_by(Lower('name'), 'id'))

        rows = self.memory_rows(user_id)
        if type:
            rows = [row for row in rows if row.type == type]
        if category:
            rows = [row for row in rows if row.category == category]
        if q:
            needle = q.lower()
            rows = [row for row in rows if needle in row.name.lower()]
        if low_only:
            rows = [row for row in rows if row.is_low]
        rows.sort(key=lambda row: (row.name.lower(), row.id))
        return [copy.copy(row) for row in rows]

    def get_stock_item(self, user_id, pk):
        return self.get(user_id, pk)

    def update_stock_item(self, user_id, pk, patch):
        return self.patch(user_id, pk, patch)

    def delete_stock_item(self, user_id, pk):
        """Delete an item; its movements stay as history with no item attached."""
        if self.use_database:
            with transaction.atomic():
                self.get(user_id, pk)
                stock_movements.queryset(user_id).filter(stock_item_id=pk).update(stock_item=None)
                self.remove(user_id, pk)
            return

        with memory.lock:
            self.remove(user_id, pk)
            stock_movements.memory_detach(user_id, 'stock_item_id', pk)

    def lock_items(self, user_id, ids):
        """Load the given items for update; missing ids are simply absent."""
        ids = {pk for pk in ids if pk is not None}
        if self.use_database:
            queryset = self.queryset(user_id).select_for_update().filter(pk__in=ids)
            return {item.id: item for item in queryset}
        found = (self.memory_find(user_id, pk) for pk in ids)
        return {row.id: copy.copy(row) for row in found if row is not None}

    def commit_items(self, items):
        for item in items.values():
            if self.use_database:
                item.save(update_fields=['current_quantity', 'updated_at'])
            else:
                self.touch(item)
                self.memory_replace(item)


class StockMovementsStorage(StorageBase):
    model = StockMovement
    table_name = 'stock_movements'
    label = 'Stock movement'

    def create_stock_movement(self, user_id, data):
        item_id = data.get('stock_item_id')
        delta = signed_delta(data['type'], data['quantity'])

        if self.use_database:
            with transaction.atomic():
                items = stock_items.lock_items(user_id, [item_id])
                if item_id not in items:
                    raise stock_items.not_found()
                rebalance(items, None, 0, item_id, delta)
                stock_items.commit_items(items)
                movement = self.model(user_id=user_id, **data)
                movement.save()
        else:
            with memory.lock:
                items = stock_items.lock_items(user_id, [item_id])
                if item_id not in items:
                    raise stock_items.not_found()
                rebalance(items, None, 0, item_id, delta)
                movement = self.model(id=memory.next_id(self.table_name), user_id=user_id, **data)
                self.touch(movement, created=True)
                stock_items.commit_items(items)
                self.rows.append(movement)
                movement = copy.copy(movement)

        logger.info(f"Stock movement {movement.id}: {movement.type} {movement.quantity} on item {item_id} for user {user_id}")
        return movement

    def list_stock_movements(self, user_id, item_id=None, date_from=None, date_to=None,
                             limit=DEFAULT_MOVEMENT_LIMIT):
        """The most recent ``limit`` movements, returned oldest first."""
        limit = max(1, min(limit or DEFAULT_MOVEMENT_LIMIT, MAX_MOVEMENT_LIMIT))

        if self.use_database:
            params = {'item_id': item_id, 'date_from': date_from, 'date_to': date_to}
            params = {key: value for key, value in params.items() if value is not None}
            queryset = StockMovementFilter(params, queryset=self.queryset(user_id)).qs
            latest = list(queryset.order_by('-created_at', '-id')[:limit])
            return latest[::-1]

        rows = self.memory_rows(user_id)
        if item_id is not None:
            rows = [row for row in rows if row.stock_item_id == item_id]
        if date_from is not None:
            rows = [row for row in rows if row.created_at >= date_from]
        if date_to is not None:
            rows = [row for row in rows if row.created_at <= date_to]
        rows.sort(key=lambda row: (row.created_at, row.id))
        return [copy.copy(row) for row in rows[-limit:]]

    def get_stock_movement(self, user_id, pk):
        return self.get(user_id, pk)

    def update_stock_movement(self, user_id, pk, patch):
        if self.use_database:
            with transaction.atomic():
                movement = self.queryset(user_id).select_for_update().filter(pk=pk).first()
                if movement is None:
                    raise self.not_found()
                return self._apply_update(user_id, movement, patch)

        with memory.lock:
            row = self.memory_find(user_id, pk)
            if row is None:
                raise self.not_found()
            return self._apply_update(user_id, copy.copy(row), patch)

    def _apply_update(self, user_id, movement, patch):
        old_item_id = movement.stock_item_id
        old_delta = movement.delta
        new_item_id = patch.get('stock_item_id') or old_item_id
        new_delta = signed_delta(patch.get('type', movement.type), patch.get('quantity', movement.quantity))

        items = stock_items.lock_items(user_id, [old_item_id, new_item_id])
        rebalance(items, old_item_id, old_delta, new_item_id, new_delta)

        for name, value in patch.items():
            setattr(movement, name, value)
        movement.stock_item_id = new_item_id

        stock_items.commit_items(items)
        if self.use_database:
            movement.save()
        else:
            self.memory_replace(movement)
            movement = copy.copy(movement)
        logger.info(f"Stock movement {movement.id} updated for user {user_id} (item {old_item_id} -> {new_item_id})")
        return movement

    def delete_stock_movement(self, user_id, pk):
        """Delete a movement after reverting its effect on the stock item."""
        if self.use_database:
            with transaction.atomic():
                movement = self.queryset(user_id).select_for_update().filter(pk=pk).first()
                if movement is None:
                    raise self.not_found()
                self._revert(user_id, movement)
                movement.delete()
            return

        with memory.lock:
            row = self.memory_find(user_id, pk)
            if row is None:
                raise self.not_found()
            self._revert(user_id, row)
            self.rows[:] = [r for r in self.rows if r.id != pk]

    def _revert(self, user_id, movement):
        items = stock_items.lock_items(user_id, [movement.stock_item_id])
        item = items.get(movement.stock_item_id)
        if item is None:
            return
        shift_quantity(item, -movement.delta)
        stock_items.commit_items(items)


stock_items = StockItemsStorage()
stock_movements = StockMovementsStorage()
