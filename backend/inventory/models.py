from decimal import Decimal

from django.conf import settings
from django.db import models


class StockItem(models.Model):
    """Consumable or material tracked by quantity (glass rods, packaging, tools...)"""
    CATEGORY_CHOICES = [
        ('glass', 'Glass'),
        ('packaging', 'Packaging'),
        ('tools', 'Tools'),
        ('consumables', 'Consumables'),
    ]

    UNIT_CHOICES = [
        ('kg', 'Kilograms'),
        ('g', 'Grams'),
        ('units', 'Units'),
        ('meters', 'Meters'),
        ('liters', 'Liters'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='stock_items')
    name = models.CharField(max_length=255)
    type = models.CharField(max_length=100)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    current_quantity = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    unit = models.CharField(max_length=20, choices=UNIT_CHOICES)
    minimum_threshold = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    supplier = models.CharField(max_length=255, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.current_quantity} {self.unit})"

    @property
    def is_low(self):
        return self.current_quantity <= self.minimum_threshold

    class Meta:
        db_table = 'stock_items'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(fields=['user', 'name'], name='uniq_stock_item_user_name'),
        ]
        indexes = [
            models.Index(fields=['user', 'category'], name='idx_stock_item_user_category'),
        ]


class StockMovement(models.Model):
    """Stock movements (in/out) applied to a stock item's quantity"""
    MOVEMENT_TYPE_CHOICES = [
        ('in', 'Stock In'),
        ('out', 'Stock Out'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='stock_movements')
    stock_item = models.ForeignKey(StockItem, on_delete=models.SET_NULL, null=True, blank=True, related_name='movements')
    type = models.CharField(max_length=10, choices=MOVEMENT_TYPE_CHOICES)
    quantity = models.DecimalField(max_digits=10, decimal_places=2)
    reason = models.CharField(max_length=255)
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.type} {self.quantity} on item {self.stock_item_id}"

    @property
    def delta(self):
        """Signed change this movement applies to its stock item"""
        return signed_delta(self.type, self.quantity)

    class Meta:
        db_table = 'stock_movements'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'stock_item'], name='idx_stock_mov_user_item'),
            models.Index(fields=['user', 'created_at'], name='idx_stock_mov_user_date'),
        ]


def signed_delta(movement_type, quantity):
    return quantity if movement_type == 'in' else -quantity
