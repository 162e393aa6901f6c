# budgets/api/urls.py

from django.urls import path

from budgets.api.views import (
    BudgetApproveView,
    BudgetConvertView,
    BudgetDetailView,
    BudgetListCreateView,
    BudgetRejectView,
    BudgetStatusView,
    BudgetSubmitView,
)

urlpatterns = [
    path("", BudgetListCreateView.as_view(), name="budgets"),
    path("<int:pk>/", BudgetDetailView.as_view(), name="budget-detail"),
    path("<int:pk>/status/", BudgetStatusView.as_view(), name="budget-status"),
    path("<int:pk>/submit/", BudgetSubmitView.as_view(), name="budget-submit"),
    path("<int:pk>/approve/", BudgetApproveView.as_view(), name="budget-approve"),
    path("<int:pk>/reject/", BudgetRejectView.as_view(), name="budget-reject"),
    path(
        "<int:pk>/convert-to-order/",
        BudgetConvertView.as_view(),
        name="budget-convert-to-order",
    ),
]
