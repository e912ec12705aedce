from django.conf import settings
from django.db import models


class PieceType(models.Model):
    """Kind of piece (vase, lamp, bowl...) defined by each artisan"""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='piece_types')
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'piece_types'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(fields=['user', 'name'], name='uniq_piece_type_user_name'),
        ]


class PieceSubtype(models.Model):
    """Refinement of a piece type"""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='piece_subtypes')
    piece_type = models.ForeignKey(PieceType, on_delete=models.CASCADE, related_name='subtypes')
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'piece_subtypes'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(fields=['user', 'piece_type', 'name'], name='uniq_piece_subtype_user_type_name'),
        ]


class Piece(models.Model):
    """A tracked artwork with its status/location lifecycle"""
    STATUS_CHOICES = [
        ('workshop', 'Workshop'),
        ('transit', 'In transit'),
        ('gallery', 'In gallery'),
        ('sold', 'Sold'),
        ('completed', 'Completed'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='pieces')
    name = models.CharField(max_length=255)
    unique_id = models.CharField(max_length=100)
    piece_type = models.ForeignKey(PieceType, on_delete=models.SET_NULL, null=True, blank=True, related_name='pieces')
    piece_subtype = models.ForeignKey(PieceSubtype, on_delete=models.SET_NULL, null=True, blank=True, related_name='pieces')
    dimensions = models.CharField(max_length=100, blank=True, null=True)
    dominant_color = models.CharField(max_length=50, blank=True, null=True)
    description = models.TextField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='workshop')
    current_location = models.CharField(max_length=100, default='atelier')
    gallery = models.ForeignKey('galleries.Gallery', on_delete=models.SET_NULL, null=True, blank=True, related_name='pieces')
    price = models.DecimalField(max_digits=10, decimal_places=2)
    image_url = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.unique_id} - {self.name}"

    class Meta:
        db_table = 'pieces'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'unique_id'], name='uniq_piece_user_unique_id'),
        ]
        indexes = [
            models.Index(fields=['user', 'status'], name='idx_piece_user_status'),
            models.Index(fields=['user', 'gallery'], name='idx_piece_user_gallery'),
        ]
