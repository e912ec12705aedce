from rest_framework import serializers
from backend.core.utils import ListQuerySerializer
from .models import Order, OrderItem


class OrderSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    gallery_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)

    class Meta:
        model = Order
        fields = ['id', 'user_id', 'order_number', 'gallery_id', 'status', 'total_amount',
                  'shipping_address', 'notes', 'shipped_at', 'delivered_at',
                  'created_at', 'updated_at']
        # total_amount is always derived from the items
        read_only_fields = ['id', 'user_id', 'total_amount', 'created_at', 'updated_at']
        # uniqueness per user is checked by the storage layer
        validators = []


class OrderItemSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    order_id = serializers.IntegerField(min_value=1)
    piece_id = serializers.IntegerField(min_value=1, required=False)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)

    class Meta:
        model = OrderItem
        fields = ['id', 'user_id', 'order_id', 'piece_id', 'price', 'created_at']
        read_only_fields = ['id', 'user_id', 'created_at']


class OrderItemCreateForOrderSerializer(OrderItemSerializer):
    """Items posted under /orders/<id>/items take the order from the URL"""
    order_id = serializers.IntegerField(read_only=True)


class OrderListQuerySerializer(ListQuerySerializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES, required=False)
    page = serializers.IntegerField(min_value=1, default=1)
    limit = serializers.IntegerField(min_value=1, default=20)


class OrderItemListQuerySerializer(ListQuerySerializer):
    order_id = serializers.IntegerField(min_value=1, required=False)
