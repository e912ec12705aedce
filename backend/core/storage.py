"""
Storage base shared by the per-entity storage classes.

Rows live in the database when ``settings.STORAGE_USE_DATABASE`` is on and in
the process-wide ``MemoryStore`` otherwise. Memory rows are unsaved model
instances, so both branches hand the same types to views and serializers.
Every read and write is scoped to the owning user.
"""
import copy
import hashlib
import logging
import re
import secrets
import threading
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from .exceptions import BusinessRuleError, DuplicateNameError, NotFoundError
from .models import PasswordResetToken

logger = logging.getLogger(__name__)

User = get_user_model()

TABLES = (
    'galleries',
    'piece_types',
    'piece_subtypes',
    'pieces',
    'stock_items',
    'stock_movements',
    'orders',
    'order_items',
    'events',
    'event_pieces',
)


class MemoryStore:
    """One list of rows per entity, shared by the whole process."""

    def __init__(self):
        self.lock = threading.RLock()
        self.tables = {}
        self.reset()

    def reset(self):
        with self.lock:
            self.tables = {name: [] for name in TABLES}

    def table(self, name):
        return self.tables[name]

    def next_id(self, name):
        rows = self.tables[name]
        return max(row.id for row in rows) + 1 if rows else 1


memory = MemoryStore()


def has_field(model, name):
    return any(field.name == name for field in model._meta.concrete_fields)


class StorageBase:
    model = None
    table_name = None
    label = 'Record'
    unique_fields = ()
    duplicate_message = 'Name already exists'

    @property
    def use_database(self):
        return bool(getattr(settings, 'STORAGE_USE_DATABASE', False))

    @property
    def rows(self):
        return memory.table(self.table_name)

    def not_found(self):
        return NotFoundError(f'{self.label} not found')

    def atomic(self):
        """Transaction for the database branch, the store lock for memory."""
        if self.use_database:
            return transaction.atomic()
        return memory.lock

    # -- database helpers --------------------------------------------------

    def queryset(self, user_id):
        return self.model.objects.filter(user_id=user_id)

    def save(self, instance):
        try:
            with transaction.atomic():
                instance.save()
        except IntegrityError as e:
            logger.warning(f"IntegrityError saving {self.label} for user {instance.user_id}: {str(e)}")
            raise DuplicateNameError(self.duplicate_message) from e
        return instance

    # -- memory helpers ----------------------------------------------------

    def memory_rows(self, user_id):
        return [row for row in self.rows if row.user_id == user_id]

    def memory_find(self, user_id, pk):
        for row in self.rows:
            if row.user_id == user_id and row.id == pk:
                return row
        return None

    def memory_replace(self, candidate):
        rows = self.rows
        for index, row in enumerate(rows):
            if row.id == candidate.id:
                rows[index] = candidate
                return
        rows.append(candidate)

    def check_unique(self, candidate):
        """Enforce the per-user unique fields on the memory branch."""
        if not self.unique_fields:
            return
        key = tuple(getattr(candidate, name) for name in self.unique_fields)
        for row in self.rows:
            if row.user_id != candidate.user_id or row.id == candidate.id:
                continue
            if tuple(getattr(row, name) for name in self.unique_fields) == key:
                raise DuplicateNameError(self.duplicate_message)

    def touch(self, instance, created=False):
        now = timezone.now()
        if created and has_field(self.model, 'created_at'):
            instance.created_at = now
        if has_field(self.model, 'updated_at'):
            instance.updated_at = now

    # -- generic CRUD ------------------------------------------------------

    def find(self, user_id, pk):
        if self.use_database:
            return self.queryset(user_id).filter(pk=pk).first()
        row = self.memory_find(user_id, pk)
        return copy.copy(row) if row is not None else None

    def get(self, user_id, pk):
        instance = self.find(user_id, pk)
        if instance is None:
            raise self.not_found()
        return instance

    def exists(self, user_id, pk):
        if pk is None:
            return False
        if self.use_database:
            return self.queryset(user_id).filter(pk=pk).exists()
        return self.memory_find(user_id, pk) is not None

    def insert(self, user_id, data):
        if self.use_database:
            return self.save(self.model(user_id=user_id, **data))
        with memory.lock:
            candidate = self.model(id=memory.next_id(self.table_name), user_id=user_id, **data)
            self.check_unique(candidate)
            self.touch(candidate, created=True)
            self.rows.append(candidate)
            return copy.copy(candidate)

    def patch(self, user_id, pk, changes):
        if self.use_database:
            instance = self.get(user_id, pk)
            for name, value in changes.items():
                setattr(instance, name, value)
            return self.save(instance)
        with memory.lock:
            row = self.memory_find(user_id, pk)
            if row is None:
                raise self.not_found()
            candidate = copy.copy(row)
            for name, value in changes.items():
                setattr(candidate, name, value)
            self.check_unique(candidate)
            self.touch(candidate)
            self.memory_replace(candidate)
            return copy.copy(candidate)

    def remove(self, user_id, pk):
        if self.use_database:
            deleted, _ = self.queryset(user_id).filter(pk=pk).delete()
            if not deleted:
                raise self.not_found()
            return
        with memory.lock:
            row = self.memory_find(user_id, pk)
            if row is None:
                raise self.not_found()
            self.rows[:] = [r for r in self.rows if r.id != row.id]

    def memory_detach(self, user_id, field, value):
        """Null out ``field`` on memory rows pointing at ``value`` (SET NULL)."""
        for row in self.rows:
            if row.user_id == user_id and getattr(row, field) == value:
                setattr(row, field, None)

    def memory_purge(self, user_id, field, value):
        """Drop memory rows whose ``field`` equals ``value`` (CASCADE)."""
        self.rows[:] = [
            row for row in self.rows
            if not (row.user_id == user_id and getattr(row, field) == value)
        ]


def paginate(items, page, page_size):
    """Slice an already-filtered list and describe the page."""
    total = len(items)
    total_pages = (total + page_size - 1) // page_size if total else 0
    start = (page - 1) * page_size
    return {
        'items': items[start:start + page_size],
        'pagination': {
            'page': page,
            'page_size': page_size,
            'total': total,
            'total_pages': total_pages,
        },
    }


def hash_reset_token(raw_token):
    return hashlib.sha256(raw_token.encode('utf-8')).hexdigest()


def normalize_reset_token(raw_token):
    """Keep only hex characters; links pasted from mail clients pick up junk."""
    return re.sub(r'[^0-9a-f]', '', (raw_token or '').strip().lower())


class UsersStorage:
    """Accounts and password reset tokens. Always database backed."""

    def find_by_identifier(self, identifier):
        identifier = (identifier or '').strip()
        if not identifier:
            return None
        return User.objects.filter(Q(email__iexact=identifier) | Q(username=identifier)).first()

    def find_by_email(self, email):
        return User.objects.filter(email__iexact=(email or '').strip()).first()

    def create_password_reset_token(self, user):
        """Store the hash of a fresh token and return the raw value."""
        raw_token = secrets.token_hex(32)
        ttl = getattr(settings, 'PASSWORD_RESET_TOKEN_TTL_MINUTES', 30)
        PasswordResetToken.objects.create(
            user=user,
            token_hash=hash_reset_token(raw_token),
            expires_at=timezone.now() + timedelta(minutes=ttl),
        )
        return raw_token

    @transaction.atomic
    def reset_password(self, raw_token, new_password):
        token = normalize_reset_token(raw_token)
        if not token:
            raise BusinessRuleError('Invalid or expired token')
        record = (
            PasswordResetToken.objects.select_for_update()
            .select_related('user')
            .filter(token_hash=hash_reset_token(token))
            .first()
        )
        if record is None or not record.is_usable:
            raise BusinessRuleError('Invalid or expired token')

        user = record.user
        # Changing the password rotates the session auth hash, so every
        # existing session for this user stops authenticating.
        user.set_password(new_password)
        user.save(update_fields=['password', 'updated_at'])

        now = timezone.now()
        PasswordResetToken.objects.filter(user=user, used_at__isnull=True).update(used_at=now)
        logger.info(f"Password reset completed for user {user.id}")
        return user


users = UsersStorage()
