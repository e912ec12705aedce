from django.urls import path
from .views import event_list_create, event_detail, event_piece_list_create, event_piece_detail

urlpatterns = [
    path('events', event_list_create, name='event-list-create'),
    path('events/<int:pk>', event_detail, name='event-detail'),
    path('events/<int:event_id>/pieces', event_piece_list_create, name='event-piece-list-create'),
    path('event-pieces/<int:pk>', event_piece_detail, name='event-piece-detail'),
]
