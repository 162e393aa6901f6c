import copy

from django.test import SimpleTestCase

from permissions.roles import ROLE_ADMIN, ROLE_MODERATOR, ROLE_USER
from workflow.services.exceptions import PermissionError as WorkflowPermissionError
from workflow.services.sanitizer import MONEY_KEYS, sanitize, sanitize_many

CLIENT = {
    "id": 7,
    "name": "Editora Aurora",
    "cnpj_cpf": "12.345.678/0001-90",
    "email": "compras@aurora.example.com",
    "phone": "+55 11 4000-0000",
    "address": "Rua das Flores, 100",
    "active": True,
}

CENTER = {"id": 3, "name": "Parque Gráfico", "type": "Offset", "obs": "night shift", "active": True}

ORDER = {
    "id": 11,
    "status": "PENDING",
    "orderType": "BUDGET_DERIVED",
    "valorUnitario": "5.5000",
    "valorTotal": "5500.00",
    "client": CLIENT,
    "center": CENTER,
    "budget": {
        "id": 5,
        "status": "CONVERTED",
        "preco_unitario": "5.5000",
        "preco_total": "5500.00",
    },
}


def _all_keys(value):
    if isinstance(value, dict):
        for key, item in value.items():
            yield key
            yield from _all_keys(item)
    elif isinstance(value, list):
        for item in value:
            yield from _all_keys(item)


class SanitizerTests(SimpleTestCase):
    def test_admin_gets_identical_copy(self):
        result = sanitize(ORDER, ROLE_ADMIN)
        self.assertEqual(result, ORDER)
        self.assertIsNot(result, ORDER)
        self.assertIsNot(result["client"], ORDER["client"])

    def test_moderator_keeps_money_and_projects_references(self):
        result = sanitize(ORDER, ROLE_MODERATOR)

        self.assertEqual(result["valorTotal"], "5500.00")
        self.assertEqual(result["budget"]["preco_total"], "5500.00")
        self.assertEqual(
            result["client"],
            {"id": 7, "name": "Editora Aurora", "email": "compras@aurora.example.com", "phone": "+55 11 4000-0000"},
        )
        self.assertEqual(result["center"], {"id": 3, "name": "Parque Gráfico", "type": "Offset"})

    def test_user_loses_money_at_every_depth(self):
        result = sanitize(ORDER, ROLE_USER)

        self.assertFalse(MONEY_KEYS & set(_all_keys(result)))
        self.assertEqual(result["client"], {"id": 7, "name": "Editora Aurora"})
        self.assertEqual(result["center"], {"id": 3, "name": "Parque Gráfico"})
        self.assertEqual(result["budget"], {"id": 5, "status": "CONVERTED"})

    def test_input_is_not_mutated(self):
        before = copy.deepcopy(ORDER)
        sanitize(ORDER, ROLE_USER)
        sanitize(ORDER, ROLE_MODERATOR)
        self.assertEqual(ORDER, before)

    def test_null_references_pass_through(self):
        budget = {"id": 1, "client": None, "center": None, "preco_total": "1.00"}
        self.assertEqual(sanitize(budget, ROLE_USER), {"id": 1, "client": None, "center": None})

    def test_unknown_role_is_rejected(self):
        with self.assertRaises(WorkflowPermissionError):
            sanitize(ORDER, "GUEST")
        with self.assertRaises(WorkflowPermissionError):
            sanitize_many([], "GUEST")

    def test_sanitize_many(self):
        result = sanitize_many([ORDER, ORDER], ROLE_USER)
        self.assertEqual(len(result), 2)
        self.assertFalse(MONEY_KEYS & set(_all_keys(result)))
