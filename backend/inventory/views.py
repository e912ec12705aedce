import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from backend.core.utils import create_audit_log, parse_query
from .serializers import (
    StockItemSerializer, StockMovementSerializer,
    StockItemListQuerySerializer, StockMovementListQuerySerializer
)
from .storage import stock_items, stock_movements

logger = logging.getLogger('backend.inventory')


# StockItem views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def stock_item_list_create(request):
    """List stock items (filters: type, category, q, low_only) or create one"""
    if request.method == 'GET':
        params = parse_query(StockItemListQuerySerializer, request)
        rows = stock_items.list_stock_items(request.user.id, **params)
        return Response(StockItemSerializer(rows, many=True).data)

    logger.info(f"User {request.user.username} creating stock item with data: {request.data}")
    serializer = StockItemSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Stock item validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    item = stock_items.create_stock_item(request.user.id, serializer.validated_data)
    create_audit_log(request, 'create', 'StockItem', item.id, object_name=item.name)
    return Response(StockItemSerializer(item).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def stock_item_detail(request, pk):
    """Retrieve, update or delete a stock item"""
    user_id = request.user.id

    if request.method == 'GET':
        return Response(StockItemSerializer(stock_items.get_stock_item(user_id, pk)).data)

    elif request.method == 'PATCH':
        serializer = StockItemSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            logger.warning(f"Stock item patch validation failed: {serializer.errors}")
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        item = stock_items.update_stock_item(user_id, pk, serializer.validated_data)
        create_audit_log(request, 'update', 'StockItem', pk, changes=serializer.validated_data, object_name=item.name)
        return Response(StockItemSerializer(item).data)

    else:  # DELETE
        stock_items.delete_stock_item(user_id, pk)
        create_audit_log(request, 'delete', 'StockItem', pk)
        logger.info(f"Stock item {pk} deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)


# StockMovement views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def stock_movement_list_create(request):
    """
    List movements (filters: item_id, from, to, limit) or record a new one.

    Recording a movement adjusts the item's quantity in the same transaction;
    an 'out' larger than the available quantity is refused.
    """
    if request.method == 'GET':
        params = parse_query(StockMovementListQuerySerializer, request)
        rows = stock_movements.list_stock_movements(request.user.id, **params)
        return Response(StockMovementSerializer(rows, many=True).data)

    logger.info(f"User {request.user.username} recording stock movement: {request.data}")
    serializer = StockMovementSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Stock movement validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    movement = stock_movements.create_stock_movement(request.user.id, serializer.validated_data)
    create_audit_log(
        request, f'stock_{movement.type}', 'StockMovement', movement.id,
        changes={'stock_item_id': movement.stock_item_id, 'quantity': movement.quantity, 'reason': movement.reason},
    )
    return Response(StockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def stock_movement_detail(request, pk):
    """Retrieve, update or delete a stock movement, rebalancing item quantities"""
    user_id = request.user.id

    if request.method == 'GET':
        return Response(StockMovementSerializer(stock_movements.get_stock_movement(user_id, pk)).data)

    elif request.method == 'PATCH':
        serializer = StockMovementSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            logger.warning(f"Stock movement patch validation failed: {serializer.errors}")
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        movement = stock_movements.update_stock_movement(user_id, pk, serializer.validated_data)
        create_audit_log(request, 'update', 'StockMovement', pk, changes=serializer.validated_data)
        return Response(StockMovementSerializer(movement).data)

    else:  # DELETE
        stock_movements.delete_stock_movement(user_id, pk)
        create_audit_log(request, 'stock_revert', 'StockMovement', pk)
        logger.info(f"Stock movement {pk} reverted and deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)
