from django.urls import path
from .views import gallery_list_create, gallery_detail

urlpatterns = [
    path('galleries', gallery_list_create, name='gallery-list-create'),
    path('galleries/<int:pk>', gallery_detail, name='gallery-detail'),
]
