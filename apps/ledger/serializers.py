from rest_framework import serializers

from .models import Expense, ExpenseDebtor, ReviewStatus


# =============================================================================
# Input Serializers
# =============================================================================

class ExpenseCreateSerializer(serializers.Serializer):
    """
    Validate input for recording an expense.

    Fields:
        title (str): What was paid for
        amount (Decimal): Positive amount every debtor owes in full
        note (str): Optional free-text note
        paid_at (date): Optional date the payer paid
        debtor_ids (list[UUID]): Members who owe the amount
    """

    title = serializers.CharField(max_length=200)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    note = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    paid_at = serializers.DateField(required=False, allow_null=True)
    debtor_ids = serializers.ListField(
        child=serializers.UUIDField(),
        allow_empty=False
    )


class PaidStatusInputSerializer(serializers.Serializer):
    """
    Validate input for the debtor's paid/unpaid toggle.

    Fields:
        is_paid (bool): Target state
        note (str): Optional payment note, ignored when marking unpaid
    """

    is_paid = serializers.BooleanField()
    # Longer notes are truncated by the service, not rejected
    note = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ReviewInputSerializer(serializers.Serializer):
    """Validate input for the owner's payment review."""

    status = serializers.ChoiceField(choices=ReviewStatus.choices)
    note = serializers.CharField(required=False, allow_blank=True, allow_null=True)


# =============================================================================
# Output Serializers
# =============================================================================

class ReviewStateSerializer(serializers.Serializer):
    status = serializers.CharField()
    note = serializers.CharField(allow_null=True)
    updated_at = serializers.DateTimeField(allow_null=True)


class ExpenseDebtorSerializer(serializers.ModelSerializer):
    """Serializer for one debtor's obligation."""

    expense_title = serializers.CharField(source='expense.title', read_only=True)
    owner_id = serializers.UUIDField(source='expense.created_by_id', read_only=True)
    review = serializers.SerializerMethodField()

    class Meta:
        model = ExpenseDebtor
        fields = [
            'id',
            'expense',
            'expense_title',
            'owner_id',
            'debtor',
            'debtor_name',
            'debtor_email',
            'owed_amount',
            'is_paid',
            'paid_at',
            'payment_note',
            'review',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_review(self, obj):
        return ReviewStateSerializer(obj.get_review_state()).data


class ExpenseSerializer(serializers.ModelSerializer):
    """Full expense with its debtors."""

    debtors = ExpenseDebtorSerializer(many=True, read_only=True)
    created_by = serializers.UUIDField(source='created_by_id', read_only=True)
    unpaid_count = serializers.SerializerMethodField()

    class Meta:
        model = Expense
        fields = [
            'id',
            'title',
            'amount',
            'note',
            'paid_at',
            'created_by',
            'created_at',
            'debtors',
            'unpaid_count',
        ]
        read_only_fields = fields

    def get_unpaid_count(self, obj):
        return sum(1 for debt in obj.debtors.all() if not debt.is_paid)


class DebtReviewSerializer(serializers.Serializer):
    debt = serializers.UUIDField(source='debt_id')
    status = serializers.CharField()
    note = serializers.CharField(allow_null=True)
    reviewed_by = serializers.UUIDField(source='reviewed_by_id', allow_null=True)
    updated_at = serializers.DateTimeField()


class PaymentPayloadSerializer(serializers.Serializer):
    """Normalised transfer instruction for one debt."""

    account_number = serializers.CharField()
    account_name = serializers.CharField()
    bank_code = serializers.CharField()
    amount = serializers.IntegerField()
    memo = serializers.CharField()
    template = serializers.CharField()


class PaymentQRSerializer(serializers.Serializer):
    qr_data_url = serializers.CharField(allow_null=True)
    qr_code = serializers.CharField(allow_null=True)
    account_name = serializers.CharField()
    account_number = serializers.CharField()
    bank_code = serializers.CharField()
    amount = serializers.IntegerField()
    memo = serializers.CharField()


class BankSerializer(serializers.Serializer):
    """One entry of the VietQR bank directory."""

    id = serializers.IntegerField(required=False)
    name = serializers.CharField()
    code = serializers.CharField()
    bin = serializers.CharField()
    shortName = serializers.CharField(required=False, allow_null=True)
    logo = serializers.CharField(required=False, allow_null=True)


class DashboardSerializer(serializers.Serializer):
    profile = serializers.DictField(allow_null=True)
    payment_ready = serializers.BooleanField()
    expenses = serializers.ListField(child=serializers.DictField())
    debts = serializers.ListField(child=serializers.DictField())
    owed_to_me = serializers.DecimalField(max_digits=16, decimal_places=2)
    i_owe = serializers.DecimalField(max_digits=16, decimal_places=2)
