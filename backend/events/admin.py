from django.contrib import admin
from .models import Event, EventPiece


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'type', 'venue', 'start_date', 'end_date', 'status']
    list_filter = ['type', 'status', 'start_date']
    search_fields = ['name', 'venue', 'description']
    ordering = ['-start_date']


@admin.register(EventPiece)
class EventPieceAdmin(admin.ModelAdmin):
    list_display = ['event', 'piece', 'display_price', 'sold', 'created_at']
    list_filter = ['sold']
    search_fields = ['event__name', 'piece__name', 'piece__unique_id']
