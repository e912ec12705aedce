from django.contrib import admin
from .models import PieceType, PieceSubtype, Piece


@admin.register(PieceType)
class PieceTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'is_active', 'created_at']
    list_filter = ['is_active', 'created_at']
    search_fields = ['name']
    ordering = ['name']


@admin.register(PieceSubtype)
class PieceSubtypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'piece_type', 'user', 'is_active', 'created_at']
    list_filter = ['is_active', 'piece_type']
    search_fields = ['name', 'piece_type__name']
    ordering = ['piece_type', 'name']


@admin.register(Piece)
class PieceAdmin(admin.ModelAdmin):
    list_display = ['unique_id', 'name', 'user', 'piece_type', 'status', 'gallery', 'price', 'created_at']
    list_filter = ['status', 'piece_type', 'gallery', 'created_at']
    search_fields = ['name', 'unique_id', 'description']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at']
