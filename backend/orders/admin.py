from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ['piece', 'price', 'created_at']
    readonly_fields = ['created_at']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'user', 'gallery', 'status', 'total_amount', 'shipped_at', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['order_number', 'gallery__name', 'notes']
    readonly_fields = ['total_amount', 'created_at', 'updated_at']
    inlines = [OrderItemInline]
    ordering = ['-created_at']


@admin.register(OrderItem)
class OrderItemAdmin(admin.ModelAdmin):
    list_display = ['order', 'piece', 'price', 'user', 'created_at']
    search_fields = ['order__order_number', 'piece__name', 'piece__unique_id']
    ordering = ['-created_at']
