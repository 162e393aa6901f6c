from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from orders.models import Order
from permissions.roles import ROLE_ADMIN, ROLE_MODERATOR, ROLE_USER
from workflow.tests.factories import (
    force_order_status,
    make_center,
    make_client,
    make_order,
    make_users,
)


class OrderApiTests(TestCase):
    def setUp(self):
        self.users = make_users()
        self.client_record = make_client()
        self.center = make_center()
        self.order = make_order(self.client_record, self.center)

    def api_for(self, role):
        api = APIClient()
        api.force_authenticate(user=self.users[role])
        return api

    def direct_payload(self, **overrides):
        data = {
            "clientId": self.client_record.pk,
            "centerId": self.center.pk,
            "title": "Banner",
            "tiragem": 10,
            "formato": "90x120cm",
            "valorUnitario": "45.00",
        }
        data.update(overrides)
        return data

    # =====================================================
    # DIRECT CREATION
    # =====================================================

    def test_user_direct_creation_is_403(self):
        res = self.api_for(ROLE_USER).post(reverse("orders"), self.direct_payload(), format="json")

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(res.data["error"]["code"], "PERMISSION_DENIED")
        self.assertEqual(Order.objects.count(), 1)

    def test_moderator_direct_creation(self):
        res = self.api_for(ROLE_MODERATOR).post(reverse("orders"), self.direct_payload(), format="json")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        self.assertEqual(res.data["orderType"], Order.TYPE_DIRECT_ORDER)
        self.assertEqual(res.data["status"], Order.STATUS_PENDING)
        self.assertIsNone(res.data["budgetId"])
        self.assertEqual(res.data["valorTotal"], "450.00")

    def test_direct_creation_with_budget_is_400(self):
        res = self.api_for(ROLE_ADMIN).post(
            reverse("orders"),
            self.direct_payload(orderType=Order.TYPE_BUDGET_DERIVED),
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "VALIDATION_ERROR")

    # =====================================================
    # READ
    # =====================================================

    def test_user_list_has_no_money(self):
        res = self.api_for(ROLE_USER).get(reverse("orders"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertNotIn("valorTotal", res.data[0])
        self.assertNotIn("valorUnitario", res.data[0])

    def test_list_filters_by_status(self):
        held = make_order(self.client_record, self.center, numero_pedido="ORD-0901/202501")
        force_order_status(held, Order.STATUS_ON_HOLD)

        res = self.api_for(ROLE_MODERATOR).get(reverse("orders"), {"status": Order.STATUS_ON_HOLD})
        self.assertEqual([row["id"] for row in res.data], [held.pk])

    # =====================================================
    # STATUS
    # =====================================================

    def test_user_can_hold_but_not_start_production(self):
        api = self.api_for(ROLE_USER)
        url = reverse("order-status", args=[self.order.pk])

        res = api.patch(url, {"status": Order.STATUS_IN_PRODUCTION}, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

        res = api.patch(url, {"status": Order.STATUS_ON_HOLD, "reason": "waiting paper"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["status"], Order.STATUS_ON_HOLD)
        self.assertNotIn("valorTotal", res.data)
        self.assertEqual(res.data["statusChange"]["reason"], "waiting paper")

    def test_same_state_is_400(self):
        res = self.api_for(ROLE_ADMIN).patch(
            reverse("order-status", args=[self.order.pk]),
            {"status": Order.STATUS_PENDING},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "SAME_STATE")

    def test_available_transitions_for_user(self):
        res = self.api_for(ROLE_USER).get(reverse("order-status", args=[self.order.pk]))
        self.assertEqual(res.data["availableTransitions"], [Order.STATUS_ON_HOLD])

    def test_missing_order_is_404(self):
        res = self.api_for(ROLE_ADMIN).get(reverse("order-status", args=[424242]))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    # =====================================================
    # UPDATE + DELETE
    # =====================================================

    def test_generic_update(self):
        res = self.api_for(ROLE_MODERATOR).patch(
            reverse("order-detail", args=[self.order.pk]),
            {"prazoEntrega": "10 dias"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["prazoEntrega"], "10 dias")
        self.assertIn("Order updated by moderator@example.com", res.data["obs_producao"])

    def test_list_body_on_update_is_validation_error(self):
        res = self.api_for(ROLE_MODERATOR).patch(
            reverse("order-detail", args=[self.order.pk]),
            [1],
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "VALIDATION_ERROR")

    def test_list_body_on_create_is_validation_error(self):
        res = self.api_for(ROLE_ADMIN).post(reverse("orders"), [1], format="json")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "VALIDATION_ERROR")
        self.assertEqual(Order.objects.count(), 1)

    def test_non_string_reason_on_status_is_validation_error(self):
        res = self.api_for(ROLE_ADMIN).patch(
            reverse("order-status", args=[self.order.pk]),
            {"status": Order.STATUS_ON_HOLD, "reason": 5},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("reason", res.data["error"]["details"])

    def test_delete_is_admin_only(self):
        url = reverse("order-detail", args=[self.order.pk])

        res = self.api_for(ROLE_MODERATOR).delete(url)
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

        res = self.api_for(ROLE_ADMIN).delete(url)
        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Order.objects.filter(pk=self.order.pk).exists())
