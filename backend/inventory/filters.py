import django_filters
from django.db.models import F
from .models import StockItem, StockMovement


class StockItemFilter(django_filters.FilterSet):
    type = django_filters.CharFilter(field_name='type')
    category = django_filters.CharFilter(field_name='category')
    q = django_filters.CharFilter(field_name='name', lookup_expr='icontains')
    low_only = django_filters.BooleanFilter(method='filter_low_only', label='Low stock only')

    class Meta:
        model = StockItem
        fields = ['type', 'category', 'q', 'low_only']

    def filter_low_only(self, queryset, name, value):
        if value:
            return queryset.filter(current_quantity__lte=F('minimum_threshold'))
        return queryset


class StockMovementFilter(django_filters.FilterSet):
    item_id = django_filters.NumberFilter(field_name='stock_item_id')
    date_from = django_filters.DateTimeFilter(field_name='created_at', lookup_expr='gte')
    date_to = django_filters.DateTimeFilter(field_name='created_at', lookup_expr='lte')

    class Meta:
        model = StockMovement
        fields = ['item_id', 'date_from', 'date_to']
