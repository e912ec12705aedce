from rest_framework import serializers
from backend.core.utils import DateBoundField, ListQuerySerializer
from .models import Event, EventPiece


class EventPieceEntrySerializer(serializers.Serializer):
    """One element of the ``pieces`` list in an event PATCH"""
    piece_id = serializers.IntegerField(min_value=1)
    display_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0,
                                             required=False, allow_null=True)
    sold = serializers.BooleanField(default=False)


class EventSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    # accept bare ISO dates as well as datetimes
    start_date = DateBoundField()
    end_date = DateBoundField(required=False, allow_null=True)
    participation_fee = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0,
                                                 required=False, allow_null=True)
    pieces = EventPieceEntrySerializer(many=True, required=False, write_only=True)

    class Meta:
        model = Event
        fields = ['id', 'user_id', 'name', 'type', 'venue', 'start_date', 'end_date',
                  'description', 'website', 'participation_fee', 'status', 'notes',
                  'pieces', 'created_at', 'updated_at']
        read_only_fields = ['id', 'user_id', 'created_at', 'updated_at']


class EventPieceSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    event_id = serializers.IntegerField(read_only=True)
    piece_id = serializers.IntegerField(min_value=1)
    display_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0,
                                             required=False, allow_null=True)

    class Meta:
        model = EventPiece
        fields = ['id', 'user_id', 'event_id', 'piece_id', 'display_price', 'sold', 'created_at']
        read_only_fields = ['id', 'user_id', 'event_id', 'created_at']
        # (event, piece) uniqueness is checked by the storage layer
        validators = []


class EventPieceDetailSerializer(EventPieceSerializer):
    piece_name = serializers.CharField(read_only=True)
    piece_unique_id = serializers.CharField(read_only=True)
    piece_status = serializers.CharField(read_only=True)
    piece_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    piece_image_url = serializers.CharField(read_only=True)

    class Meta(EventPieceSerializer.Meta):
        fields = EventPieceSerializer.Meta.fields + [
            'piece_name', 'piece_unique_id', 'piece_status', 'piece_price', 'piece_image_url',
        ]


class EventPieceUpdateSerializer(serializers.Serializer):
    display_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0,
                                             required=False, allow_null=True)
    sold = serializers.BooleanField(required=False)


class EventListQuerySerializer(ListQuerySerializer):
    aliases = {'from': 'date_from', 'to': 'date_to'}

    status = serializers.ChoiceField(choices=Event.STATUS_CHOICES, required=False)
    type = serializers.ChoiceField(choices=Event.TYPE_CHOICES, required=False)
    q = serializers.CharField(required=False)
    date_from = DateBoundField(required=False)
    date_to = DateBoundField(end=True, required=False)
