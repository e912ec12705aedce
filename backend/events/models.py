from django.conf import settings
from django.db import models


class Event(models.Model):
    """Exhibition, fair, workshop or sale the workshop takes part in"""
    TYPE_CHOICES = [
        ('exhibition', 'Exhibition'),
        ('fair', 'Fair'),
        ('workshop', 'Workshop'),
        ('sale', 'Sale'),
    ]

    STATUS_CHOICES = [
        ('planned', 'Planned'),
        ('confirmed', 'Confirmed'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='events')
    name = models.CharField(max_length=255)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='exhibition')
    venue = models.CharField(max_length=255, blank=True, null=True)
    start_date = models.DateTimeField()
    end_date = models.DateTimeField(blank=True, null=True)
    description = models.TextField(blank=True, null=True)
    website = models.URLField(max_length=500, blank=True, null=True)
    participation_fee = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='planned')
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'events'
        ordering = ['-start_date']
        indexes = [
            models.Index(fields=['user', 'start_date'], name='idx_event_user_start'),
            models.Index(fields=['user', 'status'], name='idx_event_user_status'),
        ]


class EventPiece(models.Model):
    """A piece shown at an event"""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='event_pieces')
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name='pieces')
    piece = models.ForeignKey('catalog.Piece', on_delete=models.CASCADE, related_name='event_entries')
    display_price = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True)
    sold = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Event {self.event_id} - piece {self.piece_id}"

    class Meta:
        db_table = 'event_pieces'
        ordering = ['created_at']
        constraints = [
            models.UniqueConstraint(fields=['event', 'piece'], name='uniq_event_piece'),
        ]
