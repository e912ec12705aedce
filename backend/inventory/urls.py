from django.urls import path
from .views import (
    stock_item_list_create, stock_item_detail,
    stock_movement_list_create, stock_movement_detail
)

urlpatterns = [
    # StockItem endpoints
    path('stock/items', stock_item_list_create, name='stock-item-list-create'),
    path('stock/items/<int:pk>', stock_item_detail, name='stock-item-detail'),

    # StockMovement endpoints
    path('stock/movements', stock_movement_list_create, name='stock-movement-list-create'),
    path('stock/movements/<int:pk>', stock_movement_detail, name='stock-movement-detail'),
]
