from rest_framework import serializers
from backend.core.utils import ListQuerySerializer
from .models import Gallery


class GallerySerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    commission_rate = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0,
                                               max_value=100, required=False, allow_null=True)

    class Meta:
        model = Gallery
        fields = ['id', 'user_id', 'name', 'contact_person', 'email', 'phone', 'address',
                  'city', 'country', 'commission_rate', 'notes', 'is_active',
                  'created_at', 'updated_at']
        read_only_fields = ['id', 'user_id', 'created_at', 'updated_at']


class GalleryListQuerySerializer(ListQuerySerializer):
    is_active = serializers.BooleanField(required=False)
    q = serializers.CharField(required=False)
