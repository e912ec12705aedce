from django.urls import path
from .views import (
    piece_type_list_create, piece_type_detail,
    piece_subtype_list_create, piece_subtype_detail,
    piece_list_create, piece_detail
)

urlpatterns = [
    # PieceType endpoints
    path('piece-types', piece_type_list_create, name='piece-type-list-create'),
    path('piece-types/<int:pk>', piece_type_detail, name='piece-type-detail'),

    # PieceSubtype endpoints
    path('piece-subtypes', piece_subtype_list_create, name='piece-subtype-list-create'),
    path('piece-subtypes/<int:pk>', piece_subtype_detail, name='piece-subtype-detail'),

    # Piece endpoints
    path('pieces', piece_list_create, name='piece-list-create'),
    path('pieces/<int:pk>', piece_detail, name='piece-detail'),
]
