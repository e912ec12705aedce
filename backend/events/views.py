import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from backend.core.utils import create_audit_log, parse_query
from .serializers import (
    EventSerializer, EventPieceSerializer, EventPieceDetailSerializer,
    EventPieceUpdateSerializer, EventListQuerySerializer,
)
from .storage import events, event_pieces

logger = logging.getLogger('backend.events')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def event_list_create(request):
    """List events (filters: status, type, q, from, to) or create a new event"""
    if request.method == 'GET':
        params = parse_query(EventListQuerySerializer, request)
        rows = events.list_events(request.user.id, **params)
        return Response(EventSerializer(rows, many=True).data)

    logger.info(f"User {request.user.username} creating event with data: {request.data}")
    serializer = EventSerializer(data=request.data)
    if serializer.is_valid():
        data = dict(serializer.validated_data)
        data.pop('pieces', None)
        event = events.create_event(request.user.id, data)
        create_audit_log(request, 'create', 'Event', event.id, object_name=event.name)
        logger.info(f"Event '{event.name}' created by {request.user.username}")
        return Response(EventSerializer(event).data, status=status.HTTP_201_CREATED)
    logger.warning(f"Event creation validation failed: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def event_detail(request, pk):
    """Retrieve, update or delete an event. A PATCH carrying ``pieces`` replaces the piece set."""
    user_id = request.user.id

    if request.method == 'GET':
        event = events.get_event(user_id, pk)
        return Response(EventSerializer(event).data)

    elif request.method == 'PATCH':
        serializer = EventSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            logger.warning(f"Event patch validation failed: {serializer.errors}")
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = dict(serializer.validated_data)
        entries = data.pop('pieces', None)
        if entries is None:
            event = events.update_event(user_id, pk, data)
        else:
            event = events.update_event_with_pieces(user_id, pk, data, [dict(entry) for entry in entries])
        create_audit_log(request, 'update', 'Event', pk, changes=serializer.validated_data, object_name=event.name)
        logger.info(f"Event {pk} patched by {request.user.username}")
        return Response(EventSerializer(event).data)

    else:  # DELETE
        events.delete_event(user_id, pk)
        create_audit_log(request, 'delete', 'Event', pk)
        logger.info(f"Event {pk} deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def event_piece_list_create(request, event_id):
    """List the pieces shown at an event, or add one"""
    user_id = request.user.id

    if request.method == 'GET':
        rows = event_pieces.list_event_pieces(user_id, event_id)
        return Response(EventPieceDetailSerializer(rows, many=True).data)

    serializer = EventPieceSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Event piece validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    entry = event_pieces.add_event_piece(user_id, event_id, **serializer.validated_data)
    create_audit_log(request, 'create', 'EventPiece', entry.id, changes=dict(serializer.validated_data, event_id=event_id))
    logger.info(f"Piece {entry.piece_id} added to event {event_id} by {request.user.username}")
    return Response(EventPieceSerializer(entry).data, status=status.HTTP_201_CREATED)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def event_piece_detail(request, pk):
    """Update the display price or sold flag of an event piece, or remove it"""
    user_id = request.user.id

    if request.method == 'PATCH':
        serializer = EventPieceUpdateSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        entry = event_pieces.update_event_piece(user_id, pk, serializer.validated_data)
        create_audit_log(request, 'update', 'EventPiece', pk, changes=serializer.validated_data)
        return Response(EventPieceSerializer(entry).data)

    else:  # DELETE
        event_pieces.delete_event_piece(user_id, pk)
        create_audit_log(request, 'delete', 'EventPiece', pk)
        logger.info(f"Event piece {pk} deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)
