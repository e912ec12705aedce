"""
Tests for session auth, password reset, throttling and the error envelope
"""
import re
from datetime import timedelta

from django.core import mail
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from backend.core.exceptions import BusinessRuleError
from backend.core.models import AuditLog, PasswordResetToken
from backend.core.storage import hash_reset_token, normalize_reset_token, paginate, users
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient, reset_state
from backend.core.throttles import IPRateThrottle


def extract_token(message):
    return re.search(r'token=([0-9a-f]+)', message.body).group(1)


class RegisterLoginTests(TestCase):
    """Register, login, logout and the current-user endpoint"""

    def setUp(self):
        reset_state()
        self.client = APIClient()

    def register(self, **overrides):
        data = {
            'username': 'marta',
            'password': 'secret1',
            'email': 'marta@example.com',
            'first_name': 'Marta',
            'last_name': 'Rossi',
        }
        data.update(overrides)
        return self.client.post('/api/register', data, format='json')

    def test_register_opens_session(self):
        response = self.register()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['username'], 'marta')
        self.assertEqual(response.data['user']['role'], 'artisan')
        self.assertNotIn('password', response.data['user'])

        me = self.client.get('/api/auth/user')
        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data['user']['email'], 'marta@example.com')
        self.assertTrue(AuditLog.objects.filter(action='register', object_id=str(me.data['user']['id'])).exists())

    def test_register_validation(self):
        self.assertEqual(self.register(username='ab').status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.register(password='12345').status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.register(email='not-an-email').status_code, status.HTTP_400_BAD_REQUEST)

    def test_register_duplicate_username_or_email(self):
        TestDataFactory.create_user(username='marta', email='other@example.com')
        self.assertEqual(self.register().status_code, status.HTTP_400_BAD_REQUEST)
        duplicate_email = self.register(username='marta2', email='OTHER@example.com')
        self.assertEqual(duplicate_email.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login_with_email_is_case_insensitive(self):
        TestDataFactory.create_user(username='luca', email='luca@example.com', password='glass123')
        response = self.client.post('/api/login', {'email': 'LUCA@example.com', 'password': 'glass123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['username'], 'luca')

    def test_login_with_username(self):
        TestDataFactory.create_user(username='luca', password='glass123')
        response = self.client.post('/api/login', {'username': 'luca', 'password': 'glass123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_login_bad_password(self):
        TestDataFactory.create_user(username='luca', password='glass123')
        response = self.client.post('/api/login', {'username': 'luca', 'password': 'wrong'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data, {'error': 'Invalid credentials'})

    def test_logout_ends_session(self):
        user = TestDataFactory.create_user()
        self.client.force_login(user)
        self.assertEqual(self.client.post('/api/logout').status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get('/api/auth/user').status_code, status.HTTP_401_UNAUTHORIZED)

    def test_anonymous_requests_get_401_envelope(self):
        response = self.client.get('/api/galleries')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn('error', response.data)

    def test_health_is_public(self):
        response = self.client.get('/api/health')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'ok': True})


class ThrottleTests(TestCase):

    def setUp(self):
        reset_state()
        self.client = APIClient()

    def test_parse_rate_accepts_multiplier(self):
        throttle = IPRateThrottle.__new__(IPRateThrottle)
        self.assertEqual(throttle.parse_rate('5/15m'), (5, 900))
        self.assertEqual(throttle.parse_rate('3/hour'), (3, 3600))
        self.assertEqual(throttle.parse_rate(None), (None, None))

    def test_login_is_throttled_after_five_attempts(self):
        for _ in range(5):
            response = self.client.post('/api/login', {'username': 'nobody', 'password': 'x'}, format='json')
            self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        response = self.client.post('/api/login', {'username': 'nobody', 'password': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertIn('error', response.data)


class PasswordResetTests(TestCase):
    """Forgot/reset flow with hashed single-use tokens"""

    def setUp(self):
        reset_state()
        self.client = APIClient()
        self.user = TestDataFactory.create_user(username='giulia', email='giulia@example.com', password='oldpass1')

    def test_forgot_sends_mail_for_known_email(self):
        response = self.client.post('/api/password/forgot', {'email': 'GIULIA@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn('/reset-password?token=', mail.outbox[0].body)

        token = extract_token(mail.outbox[0])
        record = PasswordResetToken.objects.get(user=self.user)
        self.assertEqual(record.token_hash, hash_reset_token(token))
        self.assertNotEqual(record.token_hash, token)

    def test_forgot_does_not_reveal_unknown_email(self):
        known = self.client.post('/api/password/forgot', {'email': 'giulia@example.com'}, format='json')
        unknown = self.client.post('/api/password/forgot', {'email': 'ghost@example.com'}, format='json')
        self.assertEqual(known.status_code, unknown.status_code)
        self.assertEqual(known.data, unknown.data)
        self.assertEqual(len(mail.outbox), 1)

    def test_reset_changes_password_once(self):
        self.client.post('/api/password/forgot', {'email': 'giulia@example.com'}, format='json')
        token = extract_token(mail.outbox[0])

        response = self.client.post('/api/password/reset', {'token': token, 'new_password': 'newpass1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('newpass1'))

        again = self.client.post('/api/password/reset', {'token': token, 'new_password': 'another1'}, format='json')
        self.assertEqual(again.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(again.data, {'error': 'Invalid or expired token'})

    def test_reset_invalidates_existing_sessions(self):
        session_client = AuthenticatedAPIClient().authenticate_user(self.user)
        self.assertEqual(session_client.get('/api/auth/user').status_code, status.HTTP_200_OK)

        raw = users.create_password_reset_token(self.user)
        users.reset_password(raw, 'newpass1')
        self.assertEqual(session_client.get('/api/auth/user').status_code, status.HTTP_401_UNAUTHORIZED)

    def test_expired_token_is_rejected(self):
        raw = users.create_password_reset_token(self.user)
        PasswordResetToken.objects.update(expires_at=timezone.now() - timedelta(minutes=1))
        with self.assertRaises(BusinessRuleError):
            users.reset_password(raw, 'newpass1')

    def test_token_is_normalized(self):
        raw = users.create_password_reset_token(self.user)
        self.assertEqual(normalize_reset_token(f'  {raw.upper()}>\n'), raw)
        users.reset_password(f' {raw} ', 'newpass1')
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('newpass1'))

    def test_short_new_password_is_rejected(self):
        raw = users.create_password_reset_token(self.user)
        response = self.client.post('/api/password/reset', {'token': raw, 'new_password': '123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(EMAIL_BACKEND='backend.core.tests.BrokenEmailBackend')
    def test_mail_failure_still_answers_200(self):
        response = self.client.post('/api/password/forgot', {'email': 'giulia@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)


class BrokenEmailBackend:
    def __init__(self, *args, **kwargs):
        pass

    def send_messages(self, messages):
        raise ConnectionRefusedError('SMTP unavailable')


class AuditLogApiTests(TestCase):

    def setUp(self):
        reset_state()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def test_mutations_are_audited_and_listed(self):
        self.client.post('/api/galleries', {'name': 'Vetro Vivo'}, format='json')
        response = self.client.get('/api/audit-logs', {'model_name': 'Gallery'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['action'], 'create')
        self.assertEqual(response.data[0]['object_name'], 'Vetro Vivo')


class PaginateTests(TestCase):

    def test_pages(self):
        result = paginate(list(range(45)), page=3, page_size=20)
        self.assertEqual(result['items'], list(range(40, 45)))
        self.assertEqual(result['pagination'], {'page': 3, 'page_size': 20, 'total': 45, 'total_pages': 3})

    def test_empty(self):
        result = paginate([], page=1, page_size=20)
        self.assertEqual(result['items'], [])
        self.assertEqual(result['pagination']['total_pages'], 0)
