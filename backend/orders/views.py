import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from backend.core.utils import create_audit_log, parse_query
from .serializers import (
    OrderSerializer, OrderItemSerializer, OrderItemCreateForOrderSerializer,
    OrderListQuerySerializer, OrderItemListQuerySerializer,
)
from .storage import orders, order_items

logger = logging.getLogger('backend.orders')


def _audit_total(request, order):
    create_audit_log(request, 'order_total', 'Order', order.id,
                     changes={'total_amount': order.total_amount}, object_name=order.order_number)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_list_create(request):
    """List orders (filters: status, page, limit) or create a new order"""
    if request.method == 'GET':
        params = parse_query(OrderListQuerySerializer, request)
        rows = orders.list_orders(request.user.id, **params)
        return Response(OrderSerializer(rows, many=True).data)

    logger.info(f"User {request.user.username} creating order with data: {request.data}")
    serializer = OrderSerializer(data=request.data)
    if serializer.is_valid():
        order = orders.create_order(request.user.id, dict(serializer.validated_data))
        create_audit_log(request, 'create', 'Order', order.id, object_name=order.order_number)
        logger.info(f"Order '{order.order_number}' created by {request.user.username}")
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)
    logger.warning(f"Order creation validation failed: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def order_detail(request, pk):
    """Retrieve, update or delete an order"""
    user_id = request.user.id

    if request.method == 'GET':
        order = orders.get_order(user_id, pk)
        return Response(OrderSerializer(order).data)

    elif request.method == 'PATCH':
        serializer = OrderSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            logger.warning(f"Order patch validation failed: {serializer.errors}")
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        order = orders.update_order(user_id, pk, serializer.validated_data)
        create_audit_log(request, 'update', 'Order', pk, changes=serializer.validated_data,
                         object_name=order.order_number)
        logger.info(f"Order {pk} patched by {request.user.username}")
        return Response(OrderSerializer(order).data)

    else:  # DELETE
        orders.delete_order(user_id, pk)
        create_audit_log(request, 'delete', 'Order', pk)
        logger.info(f"Order {pk} deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_items_for_order(request, pk):
    """List the items of one order, or add an item to it"""
    user_id = request.user.id

    if request.method == 'GET':
        rows = order_items.list_order_items_for_order(user_id, pk)
        return Response(OrderItemSerializer(rows, many=True).data)

    serializer = OrderItemCreateForOrderSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Order item validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = dict(serializer.validated_data, order_id=pk)
    item = order_items.create_order_item(user_id, data)
    create_audit_log(request, 'create', 'OrderItem', item.id, changes=data)
    _audit_total(request, orders.get_order(user_id, pk))
    logger.info(f"Piece {item.piece_id} added to order {pk} by {request.user.username}")
    return Response(OrderItemSerializer(item).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_item_list_create(request):
    """List order items (filter: order_id) or create one"""
    user_id = request.user.id

    if request.method == 'GET':
        params = parse_query(OrderItemListQuerySerializer, request)
        rows = order_items.list_order_items(user_id, **params)
        return Response(OrderItemSerializer(rows, many=True).data)

    serializer = OrderItemSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Order item validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    item = order_items.create_order_item(user_id, dict(serializer.validated_data))
    create_audit_log(request, 'create', 'OrderItem', item.id, changes=serializer.validated_data)
    _audit_total(request, orders.get_order(user_id, item.order_id))
    logger.info(f"Order item {item.id} created by {request.user.username}")
    return Response(OrderItemSerializer(item).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def order_item_detail(request, pk):
    """Retrieve, update or delete an order item"""
    user_id = request.user.id

    if request.method == 'GET':
        item = order_items.get_order_item(user_id, pk)
        return Response(OrderItemSerializer(item).data)

    elif request.method == 'PATCH':
        serializer = OrderItemSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            logger.warning(f"Order item patch validation failed: {serializer.errors}")
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        item = order_items.update_order_item(user_id, pk, serializer.validated_data)
        create_audit_log(request, 'update', 'OrderItem', pk, changes=serializer.validated_data)
        _audit_total(request, orders.get_order(user_id, item.order_id))
        logger.info(f"Order item {pk} patched by {request.user.username}")
        return Response(OrderItemSerializer(item).data)

    else:  # DELETE
        item = order_items.get_order_item(user_id, pk)
        order_items.delete_order_item(user_id, pk)
        create_audit_log(request, 'delete', 'OrderItem', pk)
        _audit_total(request, orders.get_order(user_id, item.order_id))
        logger.info(f"Order item {pk} deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)
