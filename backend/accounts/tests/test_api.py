"""
Tests for registration, login, profile management and admin user management.
"""
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from accounts.serializers import UserLoginSerializer, UserRegistrationSerializer

User = get_user_model()


class UserModelTest(TestCase):
    """Test cases for the User model."""

    def test_new_users_are_clippers(self):
        user = User.objects.create_user(username='clipper', email='clipper@example.com', password='pass1234word')

        self.assertEqual(user.role, User.Role.CLIPPER)
        self.assertFalse(user.is_admin)
        self.assertEqual(user.total_earnings, Decimal('0.00'))
        self.assertEqual(user.total_views, 0)

    def test_admin_role_grants_staff_access(self):
        """Creating an ADMIN user gives Django admin access."""
        user = User.objects.create_user(username='boss', email='boss@example.com', password='pass1234word',
                                        role=User.Role.ADMIN)

        user.refresh_from_db()
        self.assertTrue(user.is_admin)
        self.assertTrue(user.is_staff)

    def test_superuser_counts_as_admin(self):
        user = User.objects.create_superuser(username='root', email='root@example.com', password='pass1234word')

        self.assertTrue(user.is_admin)


class UserRegistrationSerializerTest(TestCase):
    """Test cases for UserRegistrationSerializer."""

    def setUp(self):
        self.data = {
            'username': 'newclipper',
            'email': 'New@Example.com',
            'password': 'clipping-rocks-42',
            'password_confirm': 'clipping-rocks-42',
        }

    def test_valid_registration_lowercases_email(self):
        serializer = UserRegistrationSerializer(data=self.data)

        self.assertTrue(serializer.is_valid(), serializer.errors)
        user = serializer.save()
        self.assertEqual(user.email, 'new@example.com')
        self.assertTrue(user.check_password('clipping-rocks-42'))

    def test_cannot_register_as_admin(self):
        serializer = UserRegistrationSerializer(data={**self.data, 'role': 'ADMIN'})

        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.save().role, User.Role.CLIPPER)

    def test_password_mismatch(self):
        serializer = UserRegistrationSerializer(data={**self.data, 'password_confirm': 'something-else-1'})

        self.assertFalse(serializer.is_valid())
        self.assertIn("Passwords don't match.", str(serializer.errors))

    def test_duplicate_email_is_case_insensitive(self):
        User.objects.create_user(username='existing', email='new@example.com', password='pass1234word')

        serializer = UserRegistrationSerializer(data=self.data)

        self.assertFalse(serializer.is_valid())
        self.assertIn('email', serializer.errors)


class UserLoginSerializerTest(TestCase):
    """Test cases for UserLoginSerializer."""

    def setUp(self):
        self.user = User.objects.create_user(username='loginuser', email='login@example.com',
                                             password='loginpass123')

    def test_login_with_email(self):
        serializer = UserLoginSerializer(data={'username': 'LOGIN@example.com', 'password': 'loginpass123'})

        self.assertTrue(serializer.is_valid())
        self.assertEqual(serializer.validated_data['user'], self.user)

    def test_inactive_user_cannot_login(self):
        self.user.is_active = False
        self.user.save()

        serializer = UserLoginSerializer(data={'username': 'loginuser', 'password': 'loginpass123'})

        self.assertFalse(serializer.is_valid())
        self.assertIn('Invalid credentials.', str(serializer.errors))


class AccountViewsTest(APITestCase):
    """Test cases for the account endpoints."""

    def setUp(self):
        cache.clear()
        self.user = User.objects.create_user(username='clipper', email='clipper@example.com',
                                             password='pass1234word', total_earnings=Decimal('12.50'))
        self.token = Token.objects.create(user=self.user)

    def test_registration_returns_token(self):
        response = self.client.post('/api/account/register/', {
            'username': 'fresh',
            'email': 'fresh@example.com',
            'password': 'clipping-rocks-42',
            'password_confirm': 'clipping-rocks-42',
            'paypal_email': 'fresh-paypal@example.com',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['user']['role'], 'CLIPPER')
        self.assertEqual(response.data['user']['paypal_email'], 'fresh-paypal@example.com')
        self.assertTrue(Token.objects.filter(key=response.data['token']).exists())

    def test_registration_failure(self):
        response = self.client.post('/api/account/register/', {'username': 'fresh'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertIn('password', response.data['errors'])

    def test_login_and_logout(self):
        response = self.client.post('/api/account/login/', {'username': 'clipper', 'password': 'pass1234word'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['token'], self.token.key)

        self.client.credentials(HTTP_AUTHORIZATION=f'Token {self.token.key}')
        response = self.client.post('/api/account/logout/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Token.objects.filter(user=self.user).exists())

    def test_profile_shows_balance_and_views(self):
        self.client.credentials(HTTP_AUTHORIZATION=f'Token {self.token.key}')

        response = self.client.get('/api/account/profile/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['total_earnings'], '12.50')
        self.assertEqual(response.data['user']['total_views'], 0)

    def test_profile_update_cannot_touch_balance_or_role(self):
        self.client.credentials(HTTP_AUTHORIZATION=f'Token {self.token.key}')

        response = self.client.patch('/api/account/profile/update/', {
            'display_name': 'Clip Master',
            'paypal_email': 'payme@example.com',
            'total_earnings': '9999.00',
            'role': 'ADMIN',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.display_name, 'Clip Master')
        self.assertEqual(self.user.paypal_email, 'payme@example.com')
        self.assertEqual(self.user.total_earnings, Decimal('12.50'))
        self.assertEqual(self.user.role, User.Role.CLIPPER)

    def test_change_password_rotates_token(self):
        self.client.credentials(HTTP_AUTHORIZATION=f'Token {self.token.key}')

        response = self.client.post('/api/account/password/change/', {
            'old_password': 'pass1234word',
            'new_password': 'brand-new-pass-9',
            'new_password_confirm': 'brand-new-pass-9',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotEqual(response.data['token'], self.token.key)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('brand-new-pass-9'))

    def test_verify_invalid_token(self):
        self.client.credentials(HTTP_AUTHORIZATION='Token not-a-real-token')

        response = self.client.get('/api/account/verify/')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class AdminUserManagementTest(APITestCase):
    """Role management through the admin user endpoints."""

    def setUp(self):
        self.admin = User.objects.create_user(username='admin', email='admin@example.com', password='pass1234word',
                                              role=User.Role.ADMIN)
        self.clipper = User.objects.create_user(username='clipper', email='clipper@example.com',
                                                password='pass1234word')

    def test_clippers_cannot_list_users(self):
        self.client.force_authenticate(self.clipper)

        response = self.client.get('/api/account/admin/users/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_lists_and_filters_users(self):
        self.client.force_authenticate(self.admin)

        response = self.client.get('/api/account/admin/users/', {'role': 'clipper'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['username'] for row in response.data['results']], ['clipper'])

    def test_promote_clipper_to_admin(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(f'/api/account/admin/users/{self.clipper.pk}/role/', {'role': 'ADMIN'},
                                    format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.clipper.refresh_from_db()
        self.assertEqual(self.clipper.role, User.Role.ADMIN)
        self.assertTrue(self.clipper.is_staff)

    def test_admin_cannot_demote_self(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(f'/api/account/admin/users/{self.admin.pk}/role/', {'role': 'CLIPPER'},
                                    format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'CANNOT_DEMOTE_SELF')
        self.admin.refresh_from_db()
        self.assertEqual(self.admin.role, User.Role.ADMIN)
