from rest_framework import viewsets, status, serializers as drf_serializers
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from .serializers import (
    ExpenseCreateSerializer,
    ExpenseSerializer,
    ExpenseDebtorSerializer,
    PaidStatusInputSerializer,
    ReviewInputSerializer,
    DebtReviewSerializer,
    PaymentPayloadSerializer,
    PaymentQRSerializer,
    BankSerializer,
    DashboardSerializer,
)
from .services import (
    create_expense,
    get_owned_expenses,
    get_debts_for_debtor,
    get_expense_for_user,
    get_debt_for_user,
    set_debt_paid_status,
    build_payment_instruction,
    request_payment_qr,
    review_debt_payment,
    build_dashboard,
    get_bank_directory,
    # Exceptions
    LedgerServiceError,
    ValidationError,
    AuthorizationError,
    NotFoundError,
    PersistenceError,
    PaymentInstructionError,
    UpstreamServiceError,
    QRServiceNotConfiguredError,
)


UUID_PATTERN = '[0-9a-fA-F-]{36}'


class ErrorResponseSerializer(drf_serializers.Serializer):
    error = drf_serializers.CharField()


def _error_response(exc: LedgerServiceError) -> Response:
    """Translate a ledger service exception into an HTTP response."""
    if isinstance(exc, (ValidationError, PaymentInstructionError)):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, AuthorizationError):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, QRServiceNotConfiguredError):
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    elif isinstance(exc, UpstreamServiceError):
        code = status.HTTP_502_BAD_GATEWAY
    elif isinstance(exc, PersistenceError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return Response({'error': str(exc)}, status=code)


class LedgerPagination(PageNumberPagination):
    """Custom pagination for ledger lists."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class ExpenseViewSet(viewsets.GenericViewSet):
    """
    Expenses the current user paid for.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Expenses created by the current user
    create: Record an expense and its debtors
    retrieve: One expense (creator or one of its debtors)
    """

    serializer_class = ExpenseSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = LedgerPagination
    lookup_value_regex = UUID_PATTERN

    def get_queryset(self):
        return get_owned_expenses(owner_id=self.request.user.id)

    def get_serializer_class(self):
        if self.action == 'create':
            return ExpenseCreateSerializer
        return ExpenseSerializer

    def list(self, request):
        page = self.paginate_queryset(self.get_queryset())
        serializer = ExpenseSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @extend_schema(
        request=ExpenseCreateSerializer,
        responses={201: ExpenseSerializer, 400: ErrorResponseSerializer, 503: ErrorResponseSerializer},
    )
    def create(self, request):
        """Record an expense; every debtor owes the full amount."""
        serializer = ExpenseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            expense = create_expense(
                creator_id=request.user.id,
                title=serializer.validated_data['title'],
                amount=serializer.validated_data['amount'],
                debtor_ids=serializer.validated_data['debtor_ids'],
                note=serializer.validated_data.get('note'),
                paid_at=serializer.validated_data.get('paid_at'),
            )
        except LedgerServiceError as e:
            return _error_response(e)

        expense = get_expense_for_user(expense_id=expense.id, user_id=request.user.id)
        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: ExpenseSerializer, 403: ErrorResponseSerializer, 404: ErrorResponseSerializer})
    def retrieve(self, request, pk=None):
        try:
            expense = get_expense_for_user(expense_id=pk, user_id=request.user.id)
        except LedgerServiceError as e:
            return _error_response(e)
        return Response(ExpenseSerializer(expense).data)


class DebtViewSet(viewsets.GenericViewSet):
    """
    Debts: what the current user owes, and the settlement actions on them.

    list: Debts of the current user
    retrieve: One debt (the debtor or the expense owner)
    paid_status: Debtor marks their debt paid or unpaid
    payment_instruction: Normalised transfer payload for the debtor
    qr: VietQR code for the debtor
    review: Owner confirms or disputes a payment
    """

    serializer_class = ExpenseDebtorSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = LedgerPagination
    lookup_value_regex = UUID_PATTERN

    def get_queryset(self):
        return get_debts_for_debtor(debtor_id=self.request.user.id)

    def list(self, request):
        page = self.paginate_queryset(self.get_queryset())
        serializer = ExpenseDebtorSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @extend_schema(responses={200: ExpenseDebtorSerializer, 403: ErrorResponseSerializer, 404: ErrorResponseSerializer})
    def retrieve(self, request, pk=None):
        try:
            debt = get_debt_for_user(debt_id=pk, user_id=request.user.id)
        except LedgerServiceError as e:
            return _error_response(e)
        return Response(ExpenseDebtorSerializer(debt).data)

    @extend_schema(
        request=PaidStatusInputSerializer,
        responses={200: ExpenseDebtorSerializer, 403: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    )
    @action(detail=True, methods=['post'], url_path='paid-status')
    def paid_status(self, request, pk=None):
        """
        Mark the caller's debt as paid or unpaid.

        POST /api/ledger/debts/{id}/paid-status/
        Body: {"is_paid": true, "note": "optional"}
        """
        serializer = PaidStatusInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            debt = set_debt_paid_status(
                debt_id=pk,
                acting_user_id=request.user.id,
                is_paid=serializer.validated_data['is_paid'],
                note=serializer.validated_data.get('note'),
            )
        except LedgerServiceError as e:
            return _error_response(e)

        return Response(ExpenseDebtorSerializer(debt).data)

    @extend_schema(responses={200: PaymentPayloadSerializer, 400: ErrorResponseSerializer, 403: ErrorResponseSerializer})
    @action(detail=True, methods=['get'], url_path='payment-instruction')
    def payment_instruction(self, request, pk=None):
        """
        Normalised bank transfer payload for the caller's debt.

        GET /api/ledger/debts/{id}/payment-instruction/
        """
        try:
            payload = build_payment_instruction(debt_id=pk, requesting_user_id=request.user.id)
        except LedgerServiceError as e:
            return _error_response(e)
        return Response(PaymentPayloadSerializer(payload).data)

    @extend_schema(
        request=None,
        responses={
            200: PaymentQRSerializer,
            400: ErrorResponseSerializer,
            403: ErrorResponseSerializer,
            502: ErrorResponseSerializer,
        },
    )
    @action(detail=True, methods=['post'])
    def qr(self, request, pk=None):
        """
        Generate a VietQR payment code for the caller's debt.

        POST /api/ledger/debts/{id}/qr/
        """
        try:
            result = request_payment_qr(debt_id=pk, requesting_user_id=request.user.id)
        except LedgerServiceError as e:
            return _error_response(e)
        return Response(PaymentQRSerializer(result).data)

    @extend_schema(
        request=ReviewInputSerializer,
        responses={200: DebtReviewSerializer, 400: ErrorResponseSerializer, 403: ErrorResponseSerializer},
    )
    @action(detail=True, methods=['post'])
    def review(self, request, pk=None):
        """
        Owner review of a debtor's payment. Does not change ``is_paid``.

        POST /api/ledger/debts/{id}/review/
        Body: {"status": "confirmed", "note": "optional"}
        """
        serializer = ReviewInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            review = review_debt_payment(
                debt_id=pk,
                owner_user_id=request.user.id,
                status=serializer.validated_data['status'],
                note=serializer.validated_data.get('note'),
            )
        except LedgerServiceError as e:
            return _error_response(e)

        return Response(DebtReviewSerializer(review).data)


@extend_schema(
    responses={200: DashboardSerializer},
    description="Expenses the current user paid for and debts they owe, with outstanding totals.",
    tags=['ledger'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    """Cached dashboard for the current user."""
    return Response(build_dashboard(user=request.user))


@extend_schema(
    responses={200: BankSerializer(many=True)},
    description="VietQR bank directory. Empty when the directory is unavailable.",
    tags=['ledger'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def banks(request):
    """List banks for the bank-info picker."""
    return Response(get_bank_directory())
