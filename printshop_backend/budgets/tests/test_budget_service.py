from decimal import Decimal

from django.test import TestCase

from budgets.models import Budget
from budgets.services.budget_service import create_budget, update_budget
from permissions.roles import ROLE_MODERATOR, ROLE_USER
from workflow.services.exceptions import (
    ImmutableFieldError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from workflow.tests.factories import (
    force_budget_status,
    make_budget,
    make_center,
    make_client,
    make_users,
    principal_for,
)


class CreateBudgetTests(TestCase):
    def setUp(self):
        users = make_users()
        self.user = principal_for(users[ROLE_USER])
        self.client_record = make_client()
        self.center = make_center()

    def payload(self, **overrides):
        data = {
            "clientId": self.client_record.pk,
            "centerId": self.center.pk,
            "titulo": "Revista Trimestral",
            "tiragem": 1000,
            "formato": "210x280mm",
            "total_pgs": 64,
            "pgs_colors": 64,
            "preco_unitario": "5.50",
        }
        data.update(overrides)
        return data

    def test_any_role_creates_draft_with_computed_total(self):
        budget = create_budget(self.payload(), self.user)

        self.assertEqual(budget.status, Budget.STATUS_DRAFT)
        self.assertEqual(budget.preco_total, Decimal("5500.00"))
        self.assertEqual(budget.created_by_id, self.user.id)
        self.assertEqual(budget.client_id, self.client_record.pk)

    def test_supplied_total_within_tolerance_is_kept(self):
        budget = create_budget(self.payload(preco_total="5500.01"), self.user)
        self.assertEqual(budget.preco_total, Decimal("5500.01"))

    def test_supplied_total_outside_tolerance_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            create_budget(self.payload(preco_total="5400.00"), self.user)
        self.assertIn("preco_total", ctx.exception.details)

    def test_colored_pages_cannot_exceed_total(self):
        with self.assertRaises(ValidationError) as ctx:
            create_budget(self.payload(total_pgs=10, pgs_colors=12), self.user)
        self.assertIn("pgs_colors", ctx.exception.details)

    def test_missing_required_fields(self):
        with self.assertRaises(ValidationError) as ctx:
            create_budget({"titulo": "x"}, self.user)
        self.assertIn("tiragem", ctx.exception.details)
        self.assertIn("preco_unitario", ctx.exception.details)

    def test_non_object_payload_is_validation_error(self):
        with self.assertRaises(ValidationError) as ctx:
            create_budget([1, 2], self.user)
        self.assertIn("non_field_errors", ctx.exception.details)
        self.assertFalse(Budget.objects.exists())

    def test_cannot_create_in_other_status(self):
        with self.assertRaises(ValidationError):
            create_budget(self.payload(status=Budget.STATUS_APPROVED), self.user)


class UpdateBudgetTests(TestCase):
    def setUp(self):
        users = make_users()
        self.moderator = principal_for(users[ROLE_MODERATOR])
        self.budget = make_budget(make_client(), make_center(), observacoes="brief")

    def test_edit_in_draft_recomputes_total_and_logs(self):
        budget = update_budget(self.budget.pk, {"tiragem": 2000}, self.moderator)

        self.assertEqual(budget.tiragem, 2000)
        self.assertEqual(budget.preco_total, Decimal("11000.00"))
        self.assertTrue(budget.observacoes.startswith("brief\n"))
        self.assertTrue(budget.observacoes.endswith("Budget updated by moderator@example.com"))

    def test_edit_without_pricing_keeps_stored_total(self):
        Budget.objects.filter(pk=self.budget.pk).update(preco_total=Decimal("5500.01"))

        budget = update_budget(self.budget.pk, {"titulo": "Só o título"}, self.moderator)

        self.assertEqual(budget.preco_total, Decimal("5500.01"))

    def test_non_object_payload_is_validation_error(self):
        with self.assertRaises(ValidationError):
            update_budget(self.budget.pk, ["titulo"], self.moderator)

    def test_edit_allowed_after_rejection(self):
        force_budget_status(self.budget, Budget.STATUS_REJECTED)
        budget = update_budget(self.budget.pk, {"formato": "A5"}, self.moderator)
        self.assertEqual(budget.formato, "A5")
        self.assertEqual(budget.status, Budget.STATUS_REJECTED)

    def test_edit_blocked_outside_draft_and_rejected(self):
        for status in (Budget.STATUS_SUBMITTED, Budget.STATUS_APPROVED, Budget.STATUS_CONVERTED):
            with self.subTest(status=status):
                force_budget_status(self.budget, status)
                with self.assertRaises(InvalidStateError):
                    update_budget(self.budget.pk, {"formato": "A5"}, self.moderator)

    def test_status_change_is_immutable_field(self):
        with self.assertRaises(ImmutableFieldError) as ctx:
            update_budget(self.budget.pk, {"status": Budget.STATUS_APPROVED}, self.moderator)
        self.assertEqual(ctx.exception.field, "status")

    def test_same_status_in_payload_is_allowed(self):
        budget = update_budget(
            self.budget.pk,
            {"status": Budget.STATUS_DRAFT, "titulo": "Novo título"},
            self.moderator,
        )
        self.assertEqual(budget.titulo, "Novo título")

    def test_audit_log_cannot_be_rewritten(self):
        with self.assertRaises(ImmutableFieldError) as ctx:
            update_budget(self.budget.pk, {"observacoes": ""}, self.moderator)
        self.assertEqual(ctx.exception.field, "observacoes")

    def test_missing_budget(self):
        with self.assertRaises(NotFoundError):
            update_budget(987654, {"titulo": "x"}, self.moderator)


class BudgetModelGuardTests(TestCase):
    def test_status_cannot_change_through_save(self):
        budget = make_budget()
        budget.status = Budget.STATUS_APPROVED

        with self.assertRaises(ImmutableFieldError):
            budget.save()

        budget.refresh_from_db()
        self.assertEqual(budget.status, Budget.STATUS_DRAFT)
