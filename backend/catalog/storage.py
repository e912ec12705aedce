import copy
import logging

from django.db import transaction
from django.db.models.functions import Lower

from backend.core.storage import StorageBase, memory
from .filters import PieceFilter, PieceSubtypeFilter, PieceTypeFilter
from .models import Piece, PieceSubtype, PieceType
from .validators import apply_gallery_status, validate_piece_references

logger = logging.getLogger(__name__)


def _by_name(rows):
    rows.sort(key=lambda row: ((row.name or '').lower(), row.id))
    return [copy.copy(row) for row in rows]


class PieceTypesStorage(StorageBase):
    model = PieceType
    table_name = 'piece_types'
    label = 'Piece type'
    unique_fields = ('name',)
    duplicate_message = 'Type name already exists'

    def create_piece_type(self, user_id, data):
        return self.insert(user_id, data)

    def list_piece_types(self, user_id, is_active=None, q=None):
        if self.use_database:
            params = {key: value for key, value in {'is_active': is_active, 'q': q}.items() if value is not None}
            queryset = PieceTypeFilter(params, queryset=self.queryset(user_id)).qs
            return list(queryset.order_by(Lower('name'), 'id'))

        rows = self.memory_rows(user_id)
        if is_active is not None:
            rows = [row for row in rows if row.is_active == is_active]
        if q:
            needle = q.lower()
            rows = [row for row in rows if needle in row.name.lower()]
        return _by_name(rows)

    def get_piece_type(self, user_id, pk):
        return self.get(user_id, pk)

    def update_piece_type(self, user_id, pk, patch):
        return self.patch(user_id, pk, patch)

    def delete_piece_type(self, user_id, pk):
        """Delete a type with its subtypes; pieces lose the type and subtype references."""
        if self.use_database:
            self.remove(user_id, pk)
            return

        with memory.lock:
            self.remove(user_id, pk)
            subtype_ids = [row.id for row in piece_subtypes.memory_rows(user_id) if row.piece_type_id == pk]
            piece_subtypes.memory_purge(user_id, 'piece_type_id', pk)
            pieces.memory_detach(user_id, 'piece_type_id', pk)
            for subtype_id in subtype_ids:
                pieces.memory_detach(user_id, 'piece_subtype_id', subtype_id)


class PieceSubtypesStorage(StorageBase):
    model = PieceSubtype
    table_name = 'piece_subtypes'
    label = 'Piece subtype'
    unique_fields = ('piece_type_id', 'name')
    duplicate_message = 'Subtype name already exists for this type'

    def list_piece_subtypes(self, user_id, piece_type_id=None, only_active=True):
        if self.use_database:
            params = {'only_active': only_active}
            if piece_type_id is not None:
                params['piece_type_id'] = piece_type_id
            queryset = PieceSubtypeFilter(params, queryset=self.queryset(user_id)).qs
            return list(queryset.order_by(Lower('name'), 'id'))

        rows = self.memory_rows(user_id)
        if piece_type_id is not None:
            rows = [row for row in rows if row.piece_type_id == piece_type_id]
        if only_active:
            rows = [row for row in rows if row.is_active]
        return _by_name(rows)

    def create_piece_subtype(self, user_id, data):
        if not piece_types.exists(user_id, data.get('piece_type_id')):
            raise piece_types.not_found()
        return self.insert(user_id, data)

    def get_piece_subtype(self, user_id, pk):
        return self.get(user_id, pk)

    def update_piece_subtype(self, user_id, pk, patch):
        if 'piece_type_id' in patch and not piece_types.exists(user_id, patch['piece_type_id']):
            raise piece_types.not_found()
        return self.patch(user_id, pk, patch)

    def delete_piece_subtype(self, user_id, pk):
        if self.use_database:
            self.remove(user_id, pk)
            return
        with memory.lock:
            self.remove(user_id, pk)
            pieces.memory_detach(user_id, 'piece_subtype_id', pk)


class PiecesStorage(StorageBase):
    model = Piece
    table_name = 'pieces'
    label = 'Piece'
    unique_fields = ('unique_id',)
    duplicate_message = 'A piece with this unique ID already exists'

    def create_piece(self, user_id, data):
        validate_piece_references(user_id, data)
        return self.insert(user_id, data)

    def list_pieces(self, user_id, status=None, piece_type_id=None, piece_subtype_id=None,
                    gallery_id=None, search=None):
        filters = {
            'status': status,
            'piece_type_id': piece_type_id,
            'piece_subtype_id': piece_subtype_id,
            'gallery_id': gallery_id,
            'search': search,
        }
        filters = {key: value for key, value in filters.items() if value is not None}

        if self.use_database:
            queryset = PieceFilter(filters, queryset=self.queryset(user_id)).qs
            return list(queryset.order_by('-created_at', '-id'))

        rows = self.memory_rows(user_id)
        for field in ('status', 'piece_type_id', 'piece_subtype_id', 'gallery_id'):
            if field in filters:
                rows = [row for row in rows if getattr(row, field) == filters[field]]
        needle = (filters.get('search') or '').strip().lower()
        if needle:
            rows = [
                row for row in rows
                if needle in row.name.lower() or needle in row.unique_id.lower()
            ]
        rows.sort(key=lambda row: (row.created_at, row.id), reverse=True)
        return [copy.copy(row) for row in rows]

    def get_piece(self, user_id, pk):
        return self.get(user_id, pk)

    def update_piece(self, user_id, pk, patch):
        current = self.get(user_id, pk)
        validate_piece_references(user_id, patch, current=current)
        return self.patch(user_id, pk, apply_gallery_status(patch))

    def delete_piece(self, user_id, pk):
        """Delete a piece, its order lines (re-totalling those orders) and its event entries."""
        from backend.events.storage import event_pieces
        from backend.orders.storage import order_items, orders

        if self.use_database:
            with transaction.atomic():
                self.get(user_id, pk)
                lines = order_items.queryset(user_id).filter(piece_id=pk)
                order_ids = set(lines.values_list('order_id', flat=True))
                lines.delete()
                event_pieces.queryset(user_id).filter(piece_id=pk).delete()
                self.remove(user_id, pk)
                for order_id in order_ids:
                    orders.recalc_order_total(user_id, order_id)
            return

        with memory.lock:
            self.remove(user_id, pk)
            order_ids = {row.order_id for row in order_items.memory_rows(user_id) if row.piece_id == pk}
            order_items.memory_purge(user_id, 'piece_id', pk)
            event_pieces.memory_purge(user_id, 'piece_id', pk)
            for order_id in order_ids:
                orders.recalc_order_total(user_id, order_id)
        logger.debug(f"Piece {pk} deleted; re-totalled orders {sorted(order_ids)}")


piece_types = PieceTypesStorage()
piece_subtypes = PieceSubtypesStorage()
pieces = PiecesStorage()
