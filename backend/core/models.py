from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


class User(AbstractUser):
    """Atelier account; every business row is owned by one user"""
    ROLE_CHOICES = [
        ('admin', 'Admin'),
        ('artisan', 'Artisan'),
        ('client', 'Client'),
    ]

    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='artisan')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'


class PasswordResetToken(models.Model):
    """Single-use password reset token. Only the sha256 hash is stored."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='password_reset_tokens')
    token_hash = models.CharField(max_length=64, unique=True)
    expires_at = models.DateTimeField()
    used_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Reset token for {self.user_id} (expires {self.expires_at:%Y-%m-%d %H:%M})"

    @property
    def is_usable(self):
        return self.used_at is None and self.expires_at > timezone.now()

    class Meta:
        db_table = 'password_reset_tokens'
        indexes = [
            models.Index(fields=['user', 'expires_at'], name='password_re_user_id_3f9c2d_idx'),
        ]


class AuditLog(models.Model):
    """Audit log for mutations and auth events"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('stock_in', 'Stock In'),
        ('stock_out', 'Stock Out'),
        ('stock_revert', 'Stock Movement Reverted'),
        ('order_total', 'Order Total Recalculated'),
        ('login', 'Login'),
        ('logout', 'Logout'),
        ('register', 'Register'),
        ('password_reset', 'Password Reset'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., piece name, order number)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_a7c1e2_idx'),
            models.Index(fields=['action'], name='audit_logs_action_5b0d3f_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_8e4a91_idx'),
        ]

    def __str__(self):
        return f"{self.action} {self.model_name}#{self.object_id}"
