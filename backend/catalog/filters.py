import django_filters
from django.db.models import Q
from .models import Piece, PieceSubtype, PieceType


class PieceTypeFilter(django_filters.FilterSet):
    is_active = django_filters.BooleanFilter(field_name='is_active')
    q = django_filters.CharFilter(field_name='name', lookup_expr='icontains')

    class Meta:
        model = PieceType
        fields = ['is_active', 'q']


class PieceSubtypeFilter(django_filters.FilterSet):
    piece_type_id = django_filters.NumberFilter(field_name='piece_type_id')
    only_active = django_filters.BooleanFilter(method='filter_only_active')

    class Meta:
        model = PieceSubtype
        fields = ['piece_type_id', 'only_active']

    def filter_only_active(self, queryset, name, value):
        if value:
            return queryset.filter(is_active=True)
        return queryset


class PieceFilter(django_filters.FilterSet):
    """Filter for Piece list queries using django-filter"""

    # Searches name and unique_id
    search = django_filters.CharFilter(method='filter_search', label='Search')

    status = django_filters.CharFilter(field_name='status')
    piece_type_id = django_filters.NumberFilter(field_name='piece_type_id')
    piece_subtype_id = django_filters.NumberFilter(field_name='piece_subtype_id')
    gallery_id = django_filters.NumberFilter(field_name='gallery_id')

    class Meta:
        model = Piece
        fields = ['search', 'status', 'piece_type_id', 'piece_subtype_id', 'gallery_id']

    def filter_search(self, queryset, name, value):
        value = (value or '').strip()
        if not value:
            return queryset
        return queryset.filter(Q(name__icontains=value) | Q(unique_id__icontains=value))
