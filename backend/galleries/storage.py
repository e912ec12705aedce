import copy

from django.db.models.functions import Lower

from backend.core.storage import StorageBase, memory
from .filters import GalleryFilter
from .models import Gallery


class GalleriesStorage(StorageBase):
    model = Gallery
    table_name = 'galleries'
    label = 'Gallery'

    def create_gallery(self, user_id, data):
        return self.insert(user_id, data)

    def list_galleries(self, user_id, is_active=None, q=None):
        if self.use_database:
            params = {'is_active': is_active, 'q': q}
            params = {key: value for key, value in params.items() if value is not None}
            queryset = GalleryFilter(params, queryset=self.queryset(user_id)).qs
            return list(queryset.order_by(Lower('name'), 'id'))

        rows = self.memory_rows(user_id)
        if is_active is not None:
            rows = [row for row in rows if row.is_active == is_active]
        if q:
            needle = q.lower()
            rows = [row for row in rows if needle in (row.name or '').lower()]
        rows.sort(key=lambda row: ((row.name or '').lower(), row.id))
        return [copy.copy(row) for row in rows]

    def get_gallery(self, user_id, pk):
        return self.get(user_id, pk)

    def update_gallery(self, user_id, pk, patch):
        return self.patch(user_id, pk, patch)

    def delete_gallery(self, user_id, pk):
        """Delete a gallery; its pieces and orders keep existing without one."""
        if self.use_database:
            # pieces.gallery and orders.gallery are SET_NULL foreign keys
            self.remove(user_id, pk)
            return

        from backend.catalog.storage import pieces
        from backend.orders.storage import orders
        with memory.lock:
            self.remove(user_id, pk)
            pieces.memory_detach(user_id, 'gallery_id', pk)
            orders.memory_detach(user_id, 'gallery_id', pk)


galleries = GalleriesStorage()
