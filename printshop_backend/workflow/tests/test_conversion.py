from decimal import Decimal

from django.test import TestCase, override_settings

from budgets.models import Budget
from orders.models import Order
from permissions.roles import ROLE_ADMIN, ROLE_MODERATOR, ROLE_USER
from workflow.services.conversion import ConversionWorkflow
from workflow.services.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PermissionError as WorkflowPermissionError,
)
from workflow.services.repository import DjangoWorkflowRepository
from workflow.tests.factories import (
    force_budget_status,
    make_budget,
    make_center,
    make_client,
    make_order,
    make_users,
    principal_for,
)


class FailingCommitRepository(DjangoWorkflowRepository):
    """Creates the order, then loses the budget swap."""

    def commit(self, kind, entity_id, mutation, expected_prior_state):
        raise ConflictError("simulated concurrent approval change")


@override_settings(ORDER_NUMBER_PREFIX="ORD")
class ConversionWorkflowTests(TestCase):
    """
    GUARANTEES:
    - succeeds iff budget is APPROVED and role is MODERATOR/ADMIN
    - never leaves a CONVERTED budget without an order
    - never leaves an APPROVED budget with an order
    """

    def setUp(self):
        users = make_users()
        self.user = principal_for(users[ROLE_USER])
        self.moderator = principal_for(users[ROLE_MODERATOR])
        self.admin = principal_for(users[ROLE_ADMIN])

        self.client_record = make_client()
        self.center = make_center()
        self.budget = make_budget(
            self.client_record,
            self.center,
            observacoes="[2025-10-01T10:00:00.000Z] Status changed from SUBMITTED to APPROVED by mod@example.com",
            prazo_producao="15 dias",
        )
        force_budget_status(self.budget, Budget.STATUS_APPROVED)

    def test_moderator_converts_approved_budget(self):
        result = ConversionWorkflow().convert(self.budget.pk, self.moderator)

        budget, order = result.budget, result.order
        self.assertEqual(budget.status, Budget.STATUS_CONVERTED)
        self.assertIsNotNone(budget.converted_at)
        self.assertIn("from APPROVED to CONVERTED by moderator@example.com", budget.observacoes)

        self.assertEqual(order.order_type, Order.TYPE_BUDGET_DERIVED)
        self.assertEqual(order.status, Order.STATUS_PENDING)
        self.assertEqual(order.budget_id, budget.pk)
        self.assertEqual(order.client_id, self.client_record.pk)
        self.assertEqual(order.center_id, self.center.pk)
        self.assertEqual(order.title, "Catálogo 2025")
        self.assertEqual(order.tiragem, 1000)
        self.assertEqual(order.num_paginas_total, 48)
        self.assertEqual(order.num_paginas_coloridas, 16)
        self.assertEqual(order.valor_unitario, Decimal("5.5000"))
        self.assertEqual(order.valor_total, Decimal("5500.00"))
        self.assertEqual(order.prazo_entrega, "15 dias")
        self.assertEqual(order.created_by_id, self.moderator.id)
        self.assertTrue(order.obs_producao.startswith("[2025-10-01T10:00:00.000Z]"))
        self.assertRegex(order.numero_pedido, r"^ORD-0001/\d{6}$")
        self.assertEqual(budget.numero_pedido, order.numero_pedido)
        self.assertEqual(budget.order.pk, order.pk)

    def test_existing_numero_pedido_is_reused(self):
        Budget.objects.filter(pk=self.budget.pk).update(numero_pedido="PED-77")
        result = ConversionWorkflow().convert(self.budget.pk, self.admin)
        self.assertEqual(result.order.numero_pedido, "PED-77")

    def test_user_cannot_convert(self):
        with self.assertRaises(WorkflowPermissionError):
            ConversionWorkflow().convert(self.budget.pk, self.user)
        self.assertFalse(Order.objects.exists())

    def test_only_approved_budgets_convert(self):
        for status in (
            Budget.STATUS_DRAFT,
            Budget.STATUS_SUBMITTED,
            Budget.STATUS_REJECTED,
            Budget.STATUS_CANCELLED,
        ):
            with self.subTest(status=status):
                force_budget_status(self.budget, status)
                with self.assertRaises(InvalidStateError):
                    ConversionWorkflow().convert(self.budget.pk, self.admin)

        self.assertFalse(Order.objects.exists())

    def test_state_is_checked_before_role(self):
        force_budget_status(self.budget, Budget.STATUS_SUBMITTED)
        with self.assertRaises(InvalidStateError):
            ConversionWorkflow().convert(self.budget.pk, self.user)

    def test_second_conversion_fails(self):
        ConversionWorkflow().convert(self.budget.pk, self.moderator)
        with self.assertRaises(InvalidStateError):
            ConversionWorkflow().convert(self.budget.pk, self.moderator)
        self.assertEqual(Order.objects.filter(budget=self.budget).count(), 1)

    def test_missing_budget(self):
        with self.assertRaises(NotFoundError):
            ConversionWorkflow().convert(424242, self.admin)

    def test_inactive_client_blocks_conversion(self):
        self.client_record.active = False
        self.client_record.save()

        with self.assertRaises(InvalidStateError) as ctx:
            ConversionWorkflow().convert(self.budget.pk, self.admin)
        self.assertEqual(ctx.exception.details["field"], "client")

    def test_lost_swap_rolls_back_order(self):
        workflow = ConversionWorkflow(repository=FailingCommitRepository())

        with self.assertRaises(ConflictError):
            workflow.convert(self.budget.pk, self.moderator)

        self.budget.refresh_from_db()
        self.assertEqual(self.budget.status, Budget.STATUS_APPROVED)
        self.assertFalse(Order.objects.filter(budget_id=self.budget.pk).exists())

    def test_duplicate_order_number_is_conflict(self):
        make_order(self.client_record, self.center, numero_pedido="PED-77")
        Budget.objects.filter(pk=self.budget.pk).update(numero_pedido="PED-77")

        with self.assertRaises(ConflictError):
            ConversionWorkflow().convert(self.budget.pk, self.admin)

        self.budget.refresh_from_db()
        self.assertEqual(self.budget.status, Budget.STATUS_APPROVED)
        self.assertFalse(Order.objects.filter(budget_id=self.budget.pk).exists())
