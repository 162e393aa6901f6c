from django.test import SimpleTestCase

from permissions.roles import (
    ROLE_ADMIN,
    ROLE_MODERATOR,
    ROLE_USER,
    has_at_least_role,
    ordered_roles,
)


class RoleHierarchyTests(SimpleTestCase):
    def test_has_at_least_role(self):
        self.assertTrue(has_at_least_role(ROLE_ADMIN, ROLE_MODERATOR))
        self.assertTrue(has_at_least_role(ROLE_MODERATOR, ROLE_MODERATOR))
        self.assertFalse(has_at_least_role(ROLE_USER, ROLE_MODERATOR))
        self.assertFalse(has_at_least_role(ROLE_MODERATOR, ROLE_ADMIN))

    def test_unknown_role_has_no_rank(self):
        self.assertFalse(has_at_least_role(None, ROLE_USER))
        self.assertFalse(has_at_least_role("GUEST", ROLE_USER))

    def test_ordered_roles_least_privileged_first(self):
        self.assertEqual(
            ordered_roles({ROLE_ADMIN, ROLE_USER, ROLE_MODERATOR}),
            [ROLE_USER, ROLE_MODERATOR, ROLE_ADMIN],
        )
