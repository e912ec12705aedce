from django.contrib import admin
from .models import StockItem, StockMovement


@admin.register(StockItem)
class StockItemAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'category', 'type', 'current_quantity', 'minimum_threshold', 'unit', 'updated_at']
    list_filter = ['category', 'unit', 'updated_at']
    search_fields = ['name', 'type', 'supplier']
    ordering = ['name']


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ['stock_item', 'user', 'type', 'quantity', 'reason', 'created_at']
    list_filter = ['type', 'created_at']
    search_fields = ['stock_item__name', 'reason', 'notes']
    ordering = ['-created_at']
    readonly_fields = ['created_at']
