import re
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

from django.test import TestCase, override_settings

from budgets.models import Budget
from orders.models import Order
from orders.services.order_number import generate_order_number
from orders.services.order_service import create_direct_order, delete_order, update_order
from permissions.roles import ROLE_ADMIN, ROLE_MODERATOR, ROLE_USER
from workflow.services.conversion import ConversionWorkflow
from workflow.services.exceptions import (
    ImmutableFieldError,
    InvalidStateError,
    PermissionError as WorkflowPermissionError,
    ValidationError,
)
from workflow.tests.factories import (
    force_budget_status,
    make_budget,
    make_center,
    make_client,
    make_order,
    make_users,
    principal_for,
)


class DirectOrderCreationTests(TestCase):
    def setUp(self):
        users = make_users()
        self.user = principal_for(users[ROLE_USER])
        self.moderator = principal_for(users[ROLE_MODERATOR])
        self.admin = principal_for(users[ROLE_ADMIN])
        self.client_record = make_client()
        self.center = make_center()

    def payload(self, **overrides):
        data = {
            "clientId": self.client_record.pk,
            "centerId": self.center.pk,
            "title": "Cartões de visita",
            "tiragem": 2000,
            "formato": "90x50mm",
            "numPaginasTotal": 2,
            "numPaginasColoridas": 2,
            "valorUnitario": "0.15",
            "prazoEntrega": "5 dias",
        }
        data.update(overrides)
        return data

    def test_user_cannot_create_directly(self):
        with self.assertRaises(WorkflowPermissionError):
            create_direct_order(self.payload(), self.user)
        self.assertFalse(Order.objects.exists())

    def test_moderator_and_admin_create_direct_orders(self):
        for principal in (self.moderator, self.admin):
            with self.subTest(role=principal.role):
                order = create_direct_order(self.payload(), principal)
                self.assertEqual(order.order_type, Order.TYPE_DIRECT_ORDER)
                self.assertEqual(order.status, Order.STATUS_PENDING)
                self.assertIsNone(order.budget_id)
                self.assertEqual(order.valor_total, Decimal("300.00"))
                self.assertEqual(order.created_by_id, principal.id)

    def test_rush_order_is_kept(self):
        order = create_direct_order(self.payload(orderType=Order.TYPE_RUSH_ORDER), self.admin)
        self.assertEqual(order.order_type, Order.TYPE_RUSH_ORDER)

    def test_budget_reference_is_rejected(self):
        budget = make_budget(self.client_record, self.center)
        with self.assertRaises(ValidationError) as ctx:
            create_direct_order(self.payload(budgetId=budget.pk), self.admin)
        self.assertIn("budgetId", ctx.exception.details)

    def test_budget_derived_type_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            create_direct_order(self.payload(orderType=Order.TYPE_BUDGET_DERIVED), self.admin)
        self.assertIn("orderType", ctx.exception.details)

    def test_inactive_client_is_rejected(self):
        self.client_record.active = False
        self.client_record.save()
        with self.assertRaises(ValidationError) as ctx:
            create_direct_order(self.payload(), self.admin)
        self.assertIn("clientId", ctx.exception.details)

    def test_invalid_payload_reports_fields(self):
        with self.assertRaises(ValidationError) as ctx:
            create_direct_order(self.payload(tiragem=0, numPaginasColoridas=3), self.admin)
        self.assertIn("tiragem", ctx.exception.details)

    @override_settings(ORDER_NUMBER_PREFIX="GRF")
    def test_numbers_are_sequential_per_month(self):
        first = create_direct_order(self.payload(), self.admin)
        second = create_direct_order(self.payload(), self.admin)

        period = re.search(r"/(\d{6})$", first.numero_pedido).group(1)
        self.assertEqual(first.numero_pedido, f"GRF-0001/{period}")
        self.assertEqual(second.numero_pedido, f"GRF-0002/{period}")


class OrderNumberTests(TestCase):
    @override_settings(ORDER_NUMBER_PREFIX="ORD", TIME_ZONE="UTC")
    def test_sequence_restarts_each_month(self):
        client, center = make_client(), make_center()
        make_order(client, center, numero_pedido="ORD-0004/202509")
        make_order(client, center, numero_pedido="ORD-0002/202510")

        october = datetime(2025, 10, 20, 9, 0, tzinfo=dt_timezone.utc)
        november = datetime(2025, 11, 2, 9, 0, tzinfo=dt_timezone.utc)

        self.assertEqual(generate_order_number(october), "ORD-0003/202510")
        self.assertEqual(generate_order_number(november), "ORD-0001/202511")


class UpdateOrderTests(TestCase):
    def setUp(self):
        users = make_users()
        self.user = principal_for(users[ROLE_USER])
        self.moderator = principal_for(users[ROLE_MODERATOR])
        self.client_record = make_client()
        self.center = make_center()
        self.order = make_order(self.client_record, self.center)

    def test_content_update_appends_audit_line(self):
        order = update_order(self.order.pk, {"title": "Folhetos A5", "obs": "papel couché"}, self.moderator)

        self.assertEqual(order.title, "Folhetos A5")
        self.assertEqual(order.obs, "papel couché")
        self.assertTrue(order.obs_producao.endswith("Order updated by moderator@example.com"))

    def test_title_only_edit_keeps_stored_total(self):
        Order.objects.filter(pk=self.order.pk).update(valor_total=Decimal("400.01"))

        order = update_order(self.order.pk, {"title": "Folhetos A4"}, self.moderator)

        self.assertEqual(order.valor_total, Decimal("400.01"))

    def test_pricing_edit_recomputes_total(self):
        order = update_order(self.order.pk, {"tiragem": 1000}, self.moderator)
        self.assertEqual(order.valor_total, Decimal("800.00"))

    def test_non_object_payload_is_validation_error(self):
        with self.assertRaises(ValidationError):
            update_order(self.order.pk, [1], self.moderator)

    def test_user_cannot_edit(self):
        with self.assertRaises(WorkflowPermissionError):
            update_order(self.order.pk, {"title": "x"}, self.user)

    def test_order_type_is_immutable(self):
        with self.assertRaises(ImmutableFieldError) as ctx:
            update_order(self.order.pk, {"orderType": Order.TYPE_RUSH_ORDER}, self.moderator)

        self.assertEqual(ctx.exception.field, "orderType")
        self.assertEqual(ctx.exception.details["currentValue"], Order.TYPE_DIRECT_ORDER)
        self.assertEqual(ctx.exception.details["attemptedValue"], Order.TYPE_RUSH_ORDER)

    def test_budget_id_is_immutable(self):
        budget = make_budget(self.client_record, self.center)
        with self.assertRaises(ImmutableFieldError) as ctx:
            update_order(self.order.pk, {"budgetId": budget.pk}, self.moderator)
        self.assertEqual(ctx.exception.field, "budgetId")

    def test_status_is_immutable_here(self):
        with self.assertRaises(ImmutableFieldError) as ctx:
            update_order(self.order.pk, {"status": Order.STATUS_COMPLETED}, self.moderator)
        self.assertEqual(ctx.exception.field, "status")

    def test_unchanged_protected_values_are_accepted(self):
        order = update_order(
            self.order.pk,
            {"orderType": Order.TYPE_DIRECT_ORDER, "budgetId": None, "title": "Novo"},
            self.moderator,
        )
        self.assertEqual(order.title, "Novo")

    def test_model_save_refuses_order_type_change(self):
        self.order.order_type = Order.TYPE_RUSH_ORDER
        with self.assertRaises(ImmutableFieldError):
            self.order.save()


class DeleteOrderTests(TestCase):
    def setUp(self):
        users = make_users()
        self.moderator = principal_for(users[ROLE_MODERATOR])
        self.admin = principal_for(users[ROLE_ADMIN])
        self.client_record = make_client()
        self.center = make_center()

    def test_only_admin_deletes(self):
        order = make_order(self.client_record, self.center)
        with self.assertRaises(WorkflowPermissionError):
            delete_order(order.pk, self.moderator)

        delete_order(order.pk, self.admin)
        self.assertFalse(Order.objects.filter(pk=order.pk).exists())

    def test_budget_derived_order_cannot_be_deleted(self):
        budget = make_budget(self.client_record, self.center)
        force_budget_status(budget, Budget.STATUS_APPROVED)
        order = ConversionWorkflow().convert(budget.pk, self.admin).order

        with self.assertRaises(InvalidStateError):
            delete_order(order.pk, self.admin)
        self.assertTrue(Order.objects.filter(pk=order.pk).exists())
