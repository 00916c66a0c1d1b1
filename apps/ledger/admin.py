from django.contrib import admin
from django.utils.html import format_html

from .models import Expense, ExpenseDebtor, DebtReview, ReviewStatus


def _badge(bg, fg, label):
    return format_html(
        '<span style="background: {}; color: {}; padding: 3px 8px; '
        'border-radius: 10px; font-size: 11px;">{}</span>',
        bg, fg, label
    )


def _paid_badge(obj):
    if obj.is_paid:
        return _badge('#6B8E5E', 'white', 'Paid')
    return _badge('#E5C49A', '#2C1810', 'Unpaid')


class ExpenseDebtorInline(admin.TabularInline):
    """Inline admin for debtors within an expense."""
    model = ExpenseDebtor
    extra = 0
    fields = [
        'debtor',
        'debtor_name',
        'owed_amount',
        'paid_badge',
        'paid_at',
        'payment_note',
    ]
    readonly_fields = fields

    def paid_badge(self, obj):
        return _paid_badge(obj)
    paid_badge.short_description = 'Status'

    def has_add_permission(self, request, obj=None):
        """Debtors are created by the expense service only."""
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    """
    Admin interface for expenses.

    Expenses are immutable once recorded, so every field is read-only.
    """

    list_display = [
        'title',
        'created_by',
        'amount',
        'get_paid_display',
        'paid_at',
        'created_at',
    ]
    list_filter = ['created_at', 'paid_at']
    search_fields = ['title', 'note', 'created_by__email', 'created_by__display_name']
    readonly_fields = ['title', 'amount', 'note', 'paid_at', 'created_by', 'created_at']
    inlines = [ExpenseDebtorInline]
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    def get_paid_display(self, obj):
        """Paid debtors out of all debtors."""
        debtors = list(obj.debtors.all())
        paid = sum(1 for debt in debtors if debt.is_paid)
        return f"{paid}/{len(debtors)}"
    get_paid_display.short_description = 'Paid'

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('created_by').prefetch_related('debtors')

    def has_add_permission(self, request):
        return False


@admin.register(ExpenseDebtor)
class ExpenseDebtorAdmin(admin.ModelAdmin):
    list_display = [
        'debtor_name',
        'debtor_email',
        'get_expense_title',
        'owed_amount',
        'paid_badge',
        'paid_at',
    ]
    list_filter = ['is_paid', 'created_at']
    search_fields = ['debtor_name', 'debtor_email', 'expense__title']
    readonly_fields = [
        'expense',
        'debtor',
        'debtor_name',
        'debtor_email',
        'owed_amount',
        'is_paid',
        'paid_at',
        'payment_note',
        'created_at',
        'updated_at',
    ]

    def get_expense_title(self, obj):
        return obj.expense.title
    get_expense_title.short_description = 'Expense'
    get_expense_title.admin_order_field = 'expense__title'

    def paid_badge(self, obj):
        return _paid_badge(obj)
    paid_badge.short_description = 'Status'

    def has_add_permission(self, request):
        return False


@admin.register(DebtReview)
class DebtReviewAdmin(admin.ModelAdmin):
    list_display = ['debt', 'status_badge', 'reviewed_by', 'updated_at']
    list_filter = ['status', 'updated_at']
    readonly_fields = ['debt', 'status', 'note', 'reviewed_by', 'updated_at']

    def status_badge(self, obj):
        colors = {
            ReviewStatus.PENDING: ('#E5C49A', '#2C1810'),
            ReviewStatus.CONFIRMED: ('#6B8E5E', 'white'),
            ReviewStatus.DISPUTED: ('#B85C5C', 'white'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return _badge(bg, fg, obj.get_status_display())
    status_badge.short_description = 'Review'

    def has_add_permission(self, request):
        return False
