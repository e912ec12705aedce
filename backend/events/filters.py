import django_filters
from .models import Event


class EventFilter(django_filters.FilterSet):
    """Filter for Event list queries; the date bounds apply to start_date"""
    status = django_filters.CharFilter(field_name='status')
    type = django_filters.CharFilter(field_name='type')
    q = django_filters.CharFilter(field_name='name', lookup_expr='icontains')
    date_from = django_filters.DateTimeFilter(field_name='start_date', lookup_expr='gte')
    date_to = django_filters.DateTimeFilter(field_name='start_date', lookup_expr='lte')

    class Meta:
        model = Event
        fields = ['status', 'type', 'q', 'date_from', 'date_to']
