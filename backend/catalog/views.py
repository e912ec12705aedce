import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from backend.core.storage import paginate
from backend.core.utils import create_audit_log, parse_query
from .serializers import (
    PieceTypeSerializer, PieceSubtypeSerializer, PieceSerializer,
    PieceTypeListQuerySerializer, PieceSubtypeListQuerySerializer, PieceListQuerySerializer
)
from .storage import piece_types, piece_subtypes, pieces
from .validators import filter_available_for_order

logger = logging.getLogger('backend.catalog')

MAX_PAGE_SIZE = 100


# PieceType views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def piece_type_list_create(request):
    """List piece types (filters: is_active, q) or create one"""
    if request.method == 'GET':
        params = parse_query(PieceTypeListQuerySerializer, request)
        rows = piece_types.list_piece_types(request.user.id, **params)
        return Response(PieceTypeSerializer(rows, many=True).data)

    serializer = PieceTypeSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Piece type validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    piece_type = piece_types.create_piece_type(request.user.id, serializer.validated_data)
    create_audit_log(request, 'create', 'PieceType', piece_type.id, object_name=piece_type.name)
    logger.info(f"Piece type '{piece_type.name}' created by {request.user.username}")
    return Response(PieceTypeSerializer(piece_type).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def piece_type_detail(request, pk):
    """Retrieve, update or delete a piece type"""
    user_id = request.user.id

    if request.method == 'GET':
        return Response(PieceTypeSerializer(piece_types.get_piece_type(user_id, pk)).data)

    elif request.method == 'PATCH':
        serializer = PieceTypeSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        piece_type = piece_types.update_piece_type(user_id, pk, serializer.validated_data)
        create_audit_log(request, 'update', 'PieceType', pk, changes=serializer.validated_data, object_name=piece_type.name)
        return Response(PieceTypeSerializer(piece_type).data)

    else:  # DELETE
        piece_types.delete_piece_type(user_id, pk)
        create_audit_log(request, 'delete', 'PieceType', pk)
        logger.info(f"Piece type {pk} deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)


# PieceSubtype views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def piece_subtype_list_create(request):
    """List subtypes (filters: piece_type_id, only_active=true) or create one"""
    if request.method == 'GET':
        params = parse_query(PieceSubtypeListQuerySerializer, request)
        rows = piece_subtypes.list_piece_subtypes(request.user.id, **params)
        return Response(PieceSubtypeSerializer(rows, many=True).data)

    serializer = PieceSubtypeSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Piece subtype validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    subtype = piece_subtypes.create_piece_subtype(request.user.id, serializer.validated_data)
    create_audit_log(request, 'create', 'PieceSubtype', subtype.id, object_name=subtype.name)
    return Response(PieceSubtypeSerializer(subtype).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def piece_subtype_detail(request, pk):
    user_id = request.user.id

    if request.method == 'GET':
        return Response(PieceSubtypeSerializer(piece_subtypes.get_piece_subtype(user_id, pk)).data)

    elif request.method == 'PATCH':
        serializer = PieceSubtypeSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        subtype = piece_subtypes.update_piece_subtype(user_id, pk, serializer.validated_data)
        create_audit_log(request, 'update', 'PieceSubtype', pk, changes=serializer.validated_data, object_name=subtype.name)
        return Response(PieceSubtypeSerializer(subtype).data)

    else:  # DELETE
        piece_subtypes.delete_piece_subtype(user_id, pk)
        create_audit_log(request, 'delete', 'PieceSubtype', pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


# Piece views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def piece_list_create(request):
    """
    List pieces or create a new piece.

    GET filters: status, piece_type_id, piece_subtype_id, gallery_id, search.
    available_for_order=true keeps pieces that can go on an order: unsold and,
    when order_id (or gallery_id) names a gallery, unplaced or in that gallery.
    paginated=true wraps the result as {items, pagination}.
    """
    user_id = request.user.id

    if request.method == 'GET':
        params = parse_query(PieceListQuerySerializer, request)
        rows = pieces.list_pieces(
            user_id,
            status=params.get('status'),
            piece_type_id=params.get('piece_type_id'),
            piece_subtype_id=params.get('piece_subtype_id'),
            gallery_id=params.get('gallery_id'),
            search=params.get('search'),
        )

        if params['available_for_order']:
            target_gallery_id = params.get('gallery_id')
            if params.get('order_id'):
                from backend.orders.storage import orders
                order = orders.get_order(user_id, params['order_id'])
                target_gallery_id = order.gallery_id
            rows = filter_available_for_order(rows, target_gallery_id)

        if params['paginated']:
            page_size = min(params['page_size'], MAX_PAGE_SIZE)
            result = paginate(rows, params['page'], page_size)
            result['items'] = PieceSerializer(result['items'], many=True).data
            return Response(result)
        return Response(PieceSerializer(rows, many=True).data)

    logger.info(f"User {request.user.username} creating piece with data: {request.data}")
    serializer = PieceSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Piece creation validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    piece = pieces.create_piece(user_id, serializer.validated_data)
    create_audit_log(request, 'create', 'Piece', piece.id, object_name=piece.name)
    logger.info(f"Piece '{piece.unique_id}' created by {request.user.username}")
    return Response(PieceSerializer(piece).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def piece_detail(request, pk):
    """Retrieve, update or delete a piece"""
    user_id = request.user.id

    if request.method == 'GET':
        return Response(PieceSerializer(pieces.get_piece(user_id, pk)).data)

    elif request.method == 'PATCH':
        logger.info(f"User {request.user.username} patching piece {pk} with data: {request.data}")
        serializer = PieceSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            logger.warning(f"Piece patch validation failed: {serializer.errors}")
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        piece = pieces.update_piece(user_id, pk, serializer.validated_data)
        create_audit_log(request, 'update', 'Piece', pk, changes=serializer.validated_data, object_name=piece.name)
        return Response(PieceSerializer(piece).data)

    else:  # DELETE
        pieces.delete_piece(user_id, pk)
        create_audit_log(request, 'delete', 'Piece', pk)
        logger.info(f"Piece {pk} deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)
