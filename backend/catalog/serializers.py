from rest_framework import serializers
from backend.core.utils import ListQuerySerializer
from .models import Piece, PieceSubtype, PieceType


def blank_to_none(value):
    if value is None:
        return None
    value = value.strip()
    return value or None


class PieceTypeSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    description = serializers.CharField(required=False, allow_null=True, allow_blank=True)

    class Meta:
        model = PieceType
        fields = ['id', 'user_id', 'name', 'description', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['id', 'user_id', 'created_at', 'updated_at']

    def validate_description(self, value):
        return blank_to_none(value)


class PieceSubtypeSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    piece_type_id = serializers.IntegerField(min_value=1)
    description = serializers.CharField(required=False, allow_null=True, allow_blank=True)

    class Meta:
        model = PieceSubtype
        fields = ['id', 'user_id', 'piece_type_id', 'name', 'description', 'is_active',
                  'created_at', 'updated_at']
        read_only_fields = ['id', 'user_id', 'created_at', 'updated_at']

    def validate_description(self, value):
        return blank_to_none(value)


class PieceSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    piece_type_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    piece_subtype_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    gallery_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)

    class Meta:
        model = Piece
        fields = ['id', 'user_id', 'name', 'unique_id', 'piece_type_id', 'piece_subtype_id',
                  'dimensions', 'dominant_color', 'description', 'status', 'current_location',
                  'gallery_id', 'price', 'image_url', 'created_at', 'updated_at']
        read_only_fields = ['id', 'user_id', 'created_at', 'updated_at']


class PieceTypeListQuerySerializer(ListQuerySerializer):
    is_active = serializers.BooleanField(required=False)
    q = serializers.CharField(required=False)


class PieceSubtypeListQuerySerializer(ListQuerySerializer):
    piece_type_id = serializers.IntegerField(min_value=1, required=False)
    only_active = serializers.BooleanField(default=True)


class PieceListQuerySerializer(ListQuerySerializer):
    status = serializers.ChoiceField(choices=Piece.STATUS_CHOICES, required=False)
    piece_type_id = serializers.IntegerField(min_value=1, required=False)
    piece_subtype_id = serializers.IntegerField(min_value=1, required=False)
    gallery_id = serializers.IntegerField(min_value=1, required=False)
    search = serializers.CharField(required=False)
    available_for_order = serializers.BooleanField(default=False)
    order_id = serializers.IntegerField(min_value=1, required=False)
    paginated = serializers.BooleanField(default=False)
    page = serializers.IntegerField(min_value=1, default=1)
    page_size = serializers.IntegerField(min_value=1, default=20)
