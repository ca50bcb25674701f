import json

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse

from civic_portal.errors import Conflict, InvalidInput

from .services import register_user

User = get_user_model()


class RegistrationServiceTests(TestCase):
    def test_register_creates_user_role_with_hashed_password(self):
        user = register_user({"name": "Jane Doe", "email": "Jane@Example.com", "password": "longenough"})
        self.assertEqual(user.role, User.Role.USER)
        self.assertEqual(user.email, "jane@example.com")
        self.assertNotEqual(user.password, "longenough")
        self.assertTrue(user.check_password("longenough"))
        self.assertFalse(user.is_admin)

    def test_role_in_input_is_ignored(self):
        user = register_user(
            {"name": "Mallory", "email": "mallory@example.com", "password": "longenough", "role": "ADMIN"}
        )
        self.assertEqual(user.role, User.Role.USER)

    def test_short_password_is_rejected(self):
        with self.assertRaises(InvalidInput) as ctx:
            register_user({"name": "Jane", "email": "jane@example.com", "password": "short"})
        self.assertIn("password", ctx.exception.errors)

    def test_duplicate_email_is_a_conflict(self):
        first = register_user({"name": "Jane", "email": "jane@example.com", "password": "longenough"})
        with self.assertRaises(Conflict):
            register_user({"name": "Other", "email": "JANE@example.com", "password": "different1"})
        first.refresh_from_db()
        self.assertEqual(first.name, "Jane")
        self.assertTrue(first.check_password("longenough"))
        self.assertEqual(User.objects.count(), 1)


class RegistrationViewTests(TestCase):
    def post_json(self, payload):
        return self.client.post(reverse("api_register"), data=json.dumps(payload), content_type="application/json")

    def test_register_api_returns_user_without_password(self):
        response = self.post_json({"name": "Jane", "email": "jane@example.com", "password": "longenough"})
        self.assertEqual(response.status_code, 201)
        user = response.json()["user"]
        self.assertEqual(user["role"], "USER")
        self.assertNotIn("password", user)

    def test_register_api_duplicate_returns_409(self):
        self.post_json({"name": "Jane", "email": "jane@example.com", "password": "longenough"})
        response = self.post_json({"name": "Jane", "email": "jane@example.com", "password": "longenough"})
        self.assertEqual(response.status_code, 409)

    def test_register_api_invalid_returns_400(self):
        response = self.post_json({"name": "", "email": "nope", "password": "x"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(set(response.json()["errors"]), {"name", "email", "password"})

    def test_signup_page_creates_user(self):
        response = self.client.post(
            reverse("signup"),
            data={"name": "New User", "email": "newuser@example.com", "password": "ComplexPass123!"},
        )
        self.assertRedirects(response, reverse("login"))
        self.assertTrue(User.objects.filter(email="newuser@example.com").exists())

    def test_signup_page_duplicate_shows_error(self):
        register_user({"name": "Jane", "email": "jane@example.com", "password": "longenough"})
        response = self.client.post(
            reverse("signup"),
            data={"name": "Jane", "email": "jane@example.com", "password": "longenough"},
        )
        self.assertEqual(response.status_code, 409)
        self.assertContains(response, "already exists", status_code=409)

    def test_login_with_email(self):
        register_user({"name": "Jane", "email": "jane@example.com", "password": "longenough"})
        self.assertTrue(self.client.login(username="jane@example.com", password="longenough"))


class UserManagerTests(TestCase):
    def test_superuser_gets_admin_role(self):
        user = User.objects.create_superuser(
            username="root@example.com",
            email="root@example.com",
            password="StrongPass123!",
        )
        self.assertEqual(user.role, User.Role.ADMIN)
        self.assertTrue(user.is_admin)

    def test_regular_user_defaults_to_user_role(self):
        user = User.objects.create_user(username="plain@example.com", email="plain@example.com", password="longenough")
        self.assertEqual(user.role, User.Role.USER)
