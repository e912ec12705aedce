import copy
import logging

from backend.core.exceptions import BusinessRuleError, DuplicateNameError
from backend.core.storage import StorageBase, memory
from .filters import EventFilter
from .models import Event, EventPiece

logger = logging.getLogger(__name__)

PIECE_DETAIL_FIELDS = {
    'piece_name': 'name',
    'piece_unique_id': 'unique_id',
    'piece_status': 'status',
    'piece_price': 'price',
    'piece_image_url': 'image_url',
}


def check_event_dates(start_date, end_date):
    if start_date is not None and end_date is not None and end_date < start_date:
        raise BusinessRuleError('end_date must be on or after start_date')


class EventsStorage(StorageBase):
    model = Event
    table_name = 'events'
    label = 'Event'

    def create_event(self, user_id, data):
        check_event_dates(data.get('start_date'), data.get('end_date'))
        return self.insert(user_id, data)

    def list_events(self, user_id, status=None, type=None, q=None, date_from=None, date_to=None):
        filters = {
            'status': status,
            'type': type,
            'q': q,
            'date_from': date_from,
            'date_to': date_to,
        }
        filters = {key: value for key, value in filters.items() if value is not None}

        if self.use_database:
            queryset = EventFilter(filters, queryset=self.queryset(user_id)).qs
            return list(queryset.order_by('-start_date', '-id'))

        rows = self.memory_rows(user_id)
        for field in ('status', 'type'):
            if field in filters:
                rows = [row for row in rows if getattr(row, field) == filters[field]]
        if q:
            needle = q.lower()
            rows = [row for row in rows if needle in row.name.lower()]
        if date_from is not None:
            rows = [row for row in rows if row.start_date >= date_from]
        if date_to is not None:
            rows = [row for row in rows if row.start_date <= date_to]
        rows.sort(key=lambda row: (row.start_date, row.id), reverse=True)
        return [copy.copy(row) for row in rows]

    def get_event(self, user_id, pk):
        return self.get(user_id, pk)

    def update_event(self, user_id, pk, patch):
        with self.atomic():
            current = self.get(user_id, pk)
            check_event_dates(
                patch.get('start_date', current.start_date),
                patch.get('end_date', current.end_date),
            )
            return self.patch(user_id, pk, patch)

    def update_event_with_pieces(self, user_id, pk, patch, pieces):
        """
        Update the event and replace its piece set with ``pieces``.

        ``pieces`` is a list of dicts with ``piece_id`` and optionally
        ``display_price`` and ``sold``. All of it happens in one transaction.
        """
        from backend.catalog.storage import pieces as piece_storage

        with self.atomic():
            self.get(user_id, pk)
            piece_ids = [entry.get('piece_id') for entry in pieces]
            if len(set(piece_ids)) != len(piece_ids):
                raise DuplicateNameError(event_pieces.duplicate_message)
            for piece_id in piece_ids:
                if not piece_storage.exists(user_id, piece_id):
                    raise piece_storage.not_found()

            event = self.update_event(user_id, pk, patch) if patch else self.get(user_id, pk)

            if self.use_database:
                event_pieces.queryset(user_id).filter(event_id=pk).delete()
            else:
                event_pieces.memory_purge(user_id, 'event_id', pk)

            for entry in pieces:
                event_pieces.insert(user_id, {
                    'event_id': pk,
                    'piece_id': entry['piece_id'],
                    'display_price': entry.get('display_price'),
                    'sold': entry.get('sold', False),
                })
            logger.info(f"Event {pk} piece set replaced with {len(pieces)} piece(s) for user {user_id}")
            return event

    def delete_event(self, user_id, pk):
        with self.atomic():
            self.get(user_id, pk)
            if self.use_database:
                event_pieces.queryset(user_id).filter(event_id=pk).delete()
            else:
                event_pieces.memory_purge(user_id, 'event_id', pk)
            self.remove(user_id, pk)


class EventPiecesStorage(StorageBase):
    model = EventPiece
    table_name = 'event_pieces'
    label = 'Event piece'
    unique_fields = ('event_id', 'piece_id')
    duplicate_message = 'Piece is already on this event'

    def add_event_piece(self, user_id, event_id, piece_id, display_price=None, sold=False):
        from backend.catalog.storage import pieces

        events.get_event(user_id, event_id)
        pieces.get_piece(user_id, piece_id)
        return self.insert(user_id, {
            'event_id': event_id,
            'piece_id': piece_id,
            'display_price': display_price,
            'sold': sold,
        })

    def list_event_pieces(self, user_id, event_id):
        """Rows of one event with the piece's name, unique id, status, price and image."""
        from backend.catalog.storage import pieces

        events.get_event(user_id, event_id)

        if self.use_database:
            rows = list(
                self.queryset(user_id).filter(event_id=event_id)
                .select_related('piece').order_by('created_at', 'id')
            )
            for row in rows:
                for attr, field in PIECE_DETAIL_FIELDS.items():
                    setattr(row, attr, getattr(row.piece, field))
            return rows

        with memory.lock:
            by_id = {piece.id: piece for piece in pieces.memory_rows(user_id)}
            rows = [copy.copy(row) for row in self.memory_rows(user_id) if row.event_id == event_id]
        rows.sort(key=lambda row: (row.created_at, row.id))
        for row in rows:
            piece = by_id.get(row.piece_id)
            for attr, field in PIECE_DETAIL_FIELDS.items():
                setattr(row, attr, getattr(piece, field) if piece is not None else None)
        return rows

    def get_event_piece(self, user_id, pk):
        return self.get(user_id, pk)

    def update_event_piece(self, user_id, pk, patch):
        return self.patch(user_id, pk, patch)

    def delete_event_piece(self, user_id, pk):
        self.remove(user_id, pk)


events = EventsStorage()
event_pieces = EventPiecesStorage()
