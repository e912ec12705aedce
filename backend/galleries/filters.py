import django_filters
from .models import Gallery


class GalleryFilter(django_filters.FilterSet):
    """Filter for Gallery list queries"""
    is_active = django_filters.BooleanFilter(field_name='is_active')
    q = django_filters.CharFilter(field_name='name', lookup_expr='icontains')

    class Meta:
        model = Gallery
        fields = ['is_active', 'q']
