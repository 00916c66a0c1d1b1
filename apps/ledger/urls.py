from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'ledger'

router = DefaultRouter()
router.register(r'expenses', views.ExpenseViewSet, basename='expense')
router.register(r'debts', views.DebtViewSet, basename='debt')

urlpatterns = [
    # Expense routes
    # GET    /api/ledger/expenses/       - Expenses I paid for
    # POST   /api/ledger/expenses/       - Record an expense
    # GET    /api/ledger/expenses/{id}/  - Expense details

    # Debt routes
    # GET    /api/ledger/debts/                            - Debts I owe
    # GET    /api/ledger/debts/{id}/                       - Debt details
    # POST   /api/ledger/debts/{id}/paid-status/           - Mark paid / unpaid
    # GET    /api/ledger/debts/{id}/payment-instruction/   - Transfer payload
    # POST   /api/ledger/debts/{id}/qr/                    - VietQR code
    # POST   /api/ledger/debts/{id}/review/                - Owner review

    path('dashboard/', views.dashboard, name='dashboard'),
    path('banks/', views.banks, name='banks'),

    path('', include(router.urls)),
]
