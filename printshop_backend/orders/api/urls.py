# orders/api/urls.py

from django.urls import path

from orders.api.views import OrderDetailView, OrderListCreateView, OrderStatusView

urlpatterns = [
    path("", OrderListCreateView.as_view(), name="orders"),
    path("<int:pk>/", OrderDetailView.as_view(), name="order-detail"),
    path("<int:pk>/status/", OrderStatusView.as_view(), name="order-status"),
]
