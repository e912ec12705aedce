from django.urls import path
from .views import (
    order_list_create, order_detail, order_items_for_order,
    order_item_list_create, order_item_detail,
)

urlpatterns = [
    path('orders', order_list_create, name='order-list-create'),
    path('orders/<int:pk>', order_detail, name='order-detail'),
    path('orders/<int:pk>/items', order_items_for_order, name='order-items-for-order'),
    path('order-items', order_item_list_create, name='order-item-list-create'),
    path('order-items/<int:pk>', order_item_detail, name='order-item-detail'),
]
