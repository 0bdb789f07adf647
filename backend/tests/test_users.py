from tests.helpers import DatabaseTestCase, TestingSession

from teenbudget.core.config import settings
from teenbudget.core.errors import ConflictError, UnauthorizedError
from teenbudget.db import models
from teenbudget.schemas.auth import UserRegister
from teenbudget.services import users
from teenbudget.services.security import verify_pin

from reset_pin import reset_pin


class UserServiceTests(DatabaseTestCase):
    def test_demo_user_created_once_with_categories(self) -> None:
        first = users.provision_demo_user(self.db)
        second = users.provision_demo_user(self.db)

        self.assertEqual(first.id, second.id)
        self.assertEqual(first.email, settings.DEMO_EMAIL)
        count = self.db.query(models.Category).filter(models.Category.user_id == first.id).count()
        self.assertEqual(count, 10)

    def test_register_hashes_pin(self) -> None:
        user = users.register_user(self.db, UserRegister(name="Jo", email="Jo@Example.com", pin="2468"))

        self.assertNotEqual(user.pin_hash, "2468")
        self.assertTrue(verify_pin("2468", user.pin_hash))
        self.assertEqual(user.email, "jo@example.com")

    def test_register_duplicate_conflicts(self) -> None:
        with self.assertRaises(ConflictError):
            users.register_user(self.db, UserRegister(name="Sam", email="teen@example.com", pin="2468"))

    def test_pin_profiles_skip_users_without_pin(self) -> None:
        users.provision_demo_user(self.db)

        profiles = users.list_pin_profiles(self.db)

        self.assertEqual([p.id for p in profiles], [self.user.id])

    def test_authenticate_rejects_unknown_and_wrong(self) -> None:
        self.assertEqual(users.authenticate_pin(self.db, self.user.id, "1234").id, self.user.id)
        with self.assertRaises(UnauthorizedError):
            users.authenticate_pin(self.db, self.user.id, "0000")
        with self.assertRaises(UnauthorizedError):
            users.authenticate_pin(self.db, 9999, "1234")

    def test_reset_pin_script(self) -> None:
        self.assertEqual(reset_pin("teen@example.com", "7777", session_factory=TestingSession), 0)
        self.assertEqual(reset_pin("nobody@example.com", "7777", session_factory=TestingSession), 1)
        self.assertEqual(reset_pin("teen@example.com", "12", session_factory=TestingSession), 2)

        self.db.expire_all()
        self.assertTrue(verify_pin("7777", self.db.get(models.User, self.user.id).pin_hash))

    def test_reset_pin_script_rejects_trailing_newline(self) -> None:
        self.assertEqual(reset_pin("teen@example.com", "1234\n", session_factory=TestingSession), 2)

        self.db.expire_all()
        self.assertTrue(verify_pin("1234", self.db.get(models.User, self.user.id).pin_hash))
