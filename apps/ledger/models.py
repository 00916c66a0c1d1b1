from django.conf import settings
from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import uuid


PAYMENT_NOTE_MAX_LENGTH = 280


class ReviewStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    CONFIRMED = 'confirmed', 'Confirmed'
    DISPUTED = 'disputed', 'Disputed'


class Expense(models.Model):
    """A spend event paid by one member on behalf of others."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    title = models.CharField(max_length=200)
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    note = models.TextField(null=True, blank=True)
    paid_at = models.DateField(null=True, blank=True)

    # Payee
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='expenses_created'
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'expenses'
        indexes = [
            models.Index(fields=['created_by', 'created_at'], name='expenses_owner_created_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.title} - {self.amount}"


class ExpenseDebtor(models.Model):
    """
    One person's obligation for an expense.

    Every debtor owes the full expense amount. ``debtor_name`` and
    ``debtor_email`` are snapshots taken at creation time and do not follow
    later profile renames.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    expense = models.ForeignKey(
        Expense,
        on_delete=models.CASCADE,
        related_name='debtors'
    )
    debtor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='debts'
    )

    # Snapshot of the debtor at creation time
    debtor_email = models.EmailField(max_length=255, editable=False)
    debtor_name = models.CharField(max_length=255, editable=False)

    owed_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )

    # Payment tracking
    is_paid = models.BooleanField(default=False)
    paid_at = models.DateTimeField(null=True, blank=True)
    payment_note = models.CharField(max_length=PAYMENT_NOTE_MAX_LENGTH, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'expense_debtors'
        unique_together = [['expense', 'debtor']]
        indexes = [
            models.Index(fields=['debtor', 'is_paid'], name='debts_debtor_paid_idx'),
            models.Index(fields=['expense', 'is_paid'], name='debts_expense_paid_idx'),
        ]
        ordering = ['created_at']

    def __str__(self):
        state = 'paid' if self.is_paid else 'unpaid'
        return f"{self.debtor_name} owes {self.owed_amount} ({state})"

    def mark_paid(self, note=None):
        """Record the debtor's own payment confirmation."""
        self.is_paid = True
        self.paid_at = timezone.now()
        self.payment_note = note or None
        self.save(update_fields=['is_paid', 'paid_at', 'payment_note', 'updated_at'])

    def mark_unpaid(self):
        """Revert to unpaid. The payment note never survives this."""
        self.is_paid = False
        self.paid_at = None
        self.payment_note = None
        self.save(update_fields=['is_paid', 'paid_at', 'payment_note', 'updated_at'])

    def get_review_state(self):
        """Owner review as a mapping; ``pending`` when never reviewed."""
        try:
            review = self.review
        except DebtReview.DoesNotExist:
            return {
                'status': ReviewStatus.PENDING.value,
                'note': None,
                'updated_at': None,
            }
        return {
            'status': review.status,
            'note': review.note,
            'updated_at': review.updated_at,
        }


class DebtReview(models.Model):
    """
    The expense owner's review of a debtor's payment.

    Advisory only: it never changes ``ExpenseDebtor.is_paid`` and does not
    block the debtor's own toggle. A debt without a row is ``pending``.
    """

    debt = models.OneToOneField(
        ExpenseDebtor,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name='review'
    )
    status = models.CharField(
        max_length=20,
        choices=ReviewStatus.choices,
        default=ReviewStatus.PENDING
    )
    note = models.CharField(max_length=PAYMENT_NOTE_MAX_LENGTH, null=True, blank=True)
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='debt_reviews'
    )
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'debt_reviews'

    def __str__(self):
        return f"Review of {self.debt_id}: {self.status}"
