from rest_framework import serializers
from backend.core.utils import DateBoundField, ListQuerySerializer
from .models import StockItem, StockMovement


class StockItemSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    current_quantity = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    minimum_threshold = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    is_low = serializers.BooleanField(read_only=True)

    class Meta:
        model = StockItem
        fields = ['id', 'user_id', 'name', 'type', 'category', 'current_quantity', 'unit',
                  'minimum_threshold', 'is_low', 'supplier', 'notes', 'created_at', 'updated_at']
        read_only_fields = ['id', 'user_id', 'is_low', 'created_at', 'updated_at']


class StockMovementSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    stock_item_id = serializers.IntegerField(min_value=1)
    quantity = serializers.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        model = StockMovement
        fields = ['id', 'user_id', 'stock_item_id', 'type', 'quantity', 'reason', 'notes', 'created_at']
        read_only_fields = ['id', 'user_id', 'created_at']

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError('Quantity must be greater than zero')
        return value


class StockItemListQuerySerializer(ListQuerySerializer):
    type = serializers.CharField(required=False)
    category = serializers.ChoiceField(choices=StockItem.CATEGORY_CHOICES, required=False)
    q = serializers.CharField(required=False)
    low_only = serializers.BooleanField(default=False)


class StockMovementListQuerySerializer(ListQuerySerializer):
    aliases = {'from': 'date_from', 'to': 'date_to'}

    item_id = serializers.IntegerField(min_value=1, required=False)
    date_from = DateBoundField(required=False)
    date_to = DateBoundField(end=True, required=False)
    limit = serializers.IntegerField(min_value=1, default=100)
