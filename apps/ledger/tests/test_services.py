import uuid
import pytest
from decimal import Decimal
from datetime import date
from unittest.mock import patch
from django.db import DatabaseError
from apps.accounts.models import User, Profile
from apps.ledger.models import Expense, ExpenseDebtor
from apps.ledger.services import (
    create_expense,
    set_debt_paid_status,
    get_owned_expenses,
    get_debts_for_debtor,
    get_expense_for_user,
    get_debt_for_user,
    build_dashboard,
    get_cached_dashboard,
    ValidationError,
    AuthorizationError,
    NotFoundError,
    PersistenceError,
)


# =============================================================================
# create_expense
# =============================================================================

@pytest.mark.django_db
class TestCreateExpense:
    """Tests for create_expense"""

    def test_each_debtor_owes_full_amount(self, payee, debtor1, debtor2):
        expense = create_expense(
            creator_id=payee.id,
            title='Tiền nhà',
            amount=Decimal('300000'),
            debtor_ids=[debtor1.id, debtor2.id],
        )

        debts = list(expense.debtors.all())
        assert len(debts) == 2
        assert all(debt.owed_amount == Decimal('300000.00') for debt in debts)
        assert all(debt.is_paid is False for debt in debts)
        assert all(debt.paid_at is None and debt.payment_note is None for debt in debts)

    def test_snapshots_debtor_name_and_email(self, payee, debtor1):
        expense = create_expense(
            creator_id=payee.id,
            title='Cafe',
            amount=50000,
            debtor_ids=[debtor1.id],
        )

        debt = expense.debtors.get()
        assert debt.debtor_name == 'Trần Bình'
        assert debt.debtor_email == 'debtor1@example.com'

    def test_snapshot_survives_profile_rename(self, payee, debtor1):
        expense = create_expense(
            creator_id=payee.id,
            title='Cafe',
            amount=50000,
            debtor_ids=[debtor1.id],
        )
        Profile.objects.filter(user=debtor1).update(display_name='Renamed')

        debt = expense.debtors.get()
        assert debt.debtor_name == 'Trần Bình'

    def test_name_falls_back_to_email(self, payee, debtor1):
        Profile.objects.filter(user=debtor1).update(display_name='')

        expense = create_expense(
            creator_id=payee.id,
            title='Cafe',
            amount=50000,
            debtor_ids=[debtor1.id],
        )

        assert expense.debtors.get().debtor_name == 'debtor1@example.com'

    def test_duplicates_and_creator_removed(self, payee, debtor1):
        expense = create_expense(
            creator_id=payee.id,
            title='Cafe',
            amount=50000,
            debtor_ids=[debtor1.id, str(debtor1.id), payee.id],
        )

        assert list(expense.debtors.values_list('debtor_id', flat=True)) == [debtor1.id]

    def test_only_creator_selected_rejected(self, payee):
        with pytest.raises(ValidationError):
            create_expense(
                creator_id=payee.id,
                title='Cafe',
                amount=50000,
                debtor_ids=[payee.id],
            )
        assert Expense.objects.count() == 0

    def test_empty_debtors_rejected(self, payee):
        with pytest.raises(ValidationError):
            create_expense(creator_id=payee.id, title='Cafe', amount=50000, debtor_ids=[])

    def test_title_trimmed_and_required(self, payee, debtor1):
        with pytest.raises(ValidationError):
            create_expense(creator_id=payee.id, title='   ', amount=1, debtor_ids=[debtor1.id])

        expense = create_expense(
            creator_id=payee.id,
            title='  Cafe  ',
            amount=1,
            debtor_ids=[debtor1.id],
        )
        assert expense.title == 'Cafe'

    def test_title_too_long_rejected(self, payee, debtor1):
        with pytest.raises(ValidationError):
            create_expense(creator_id=payee.id, title='x' * 201, amount=1, debtor_ids=[debtor1.id])

    @pytest.mark.parametrize('amount', [
        0, -5, '0.001', 'abc', 'NaN', 'Infinity', None,
        Decimal('1e30'), 10 ** 13, Decimal('1000000000000'), '999999999999.995',
    ])
    def test_invalid_amount_rejected(self, payee, debtor1, amount):
        with pytest.raises(ValidationError):
            create_expense(creator_id=payee.id, title='Cafe', amount=amount, debtor_ids=[debtor1.id])
        assert ExpenseDebtor.objects.count() == 0

    def test_largest_amount_accepted_and_readable(self, payee, debtor1):
        create_expense(
            creator_id=payee.id,
            title='Tiền nhà',
            amount='999999999999.99',
            debtor_ids=[debtor1.id],
        )

        assert Expense.objects.get().amount == Decimal('999999999999.99')
        assert get_debts_for_debtor(debtor_id=debtor1.id).get().owed_amount == Decimal('999999999999.99')

    def test_two_decimal_amount_owed_in_full(self, payee, debtor1, debtor2):
        expense = create_expense(
            creator_id=payee.id,
            title='Tiền nhà',
            amount=Decimal('1500000.00'),
            debtor_ids=[debtor1.id, debtor2.id],
        )

        expense.refresh_from_db()
        assert expense.amount == Decimal('1500000.00')
        assert sorted(expense.debtors.values_list('owed_amount', flat=True)) == [
            Decimal('1500000.00'),
            Decimal('1500000.00'),
        ]

    def test_amount_quantised_half_up(self, payee, debtor1):
        expense = create_expense(
            creator_id=payee.id,
            title='Cafe',
            amount='10.005',
            debtor_ids=[debtor1.id],
        )

        expense.refresh_from_db()
        assert expense.amount == Decimal('10.01')

    def test_unknown_debtor_rejected(self, payee, debtor1):
        with pytest.raises(ValidationError):
            create_expense(
                creator_id=payee.id,
                title='Cafe',
                amount=1,
                debtor_ids=[debtor1.id, uuid.uuid4()],
            )
        assert Expense.objects.count() == 0

    def test_malformed_debtor_id_rejected(self, payee):
        with pytest.raises(ValidationError):
            create_expense(creator_id=payee.id, title='Cafe', amount=1, debtor_ids=['not-a-uuid'])

    def test_user_without_profile_rejected(self, payee):
        stranger = User.objects.create_user(email='noprofile@example.com', password='TestPass123!')

        with pytest.raises(ValidationError):
            create_expense(creator_id=payee.id, title='Cafe', amount=1, debtor_ids=[stranger.id])

    def test_debtor_without_email_rejected(self, payee, debtor1):
        Profile.objects.filter(user=debtor1).update(email=None)

        with pytest.raises(ValidationError):
            create_expense(creator_id=payee.id, title='Cafe', amount=1, debtor_ids=[debtor1.id])
        assert Expense.objects.count() == 0

    def test_note_trimmed_empty_becomes_none(self, payee, debtor1):
        expense = create_expense(
            creator_id=payee.id,
            title='Cafe',
            amount=1,
            debtor_ids=[debtor1.id],
            note='   ',
            paid_at=date(2026, 3, 19),
        )

        assert expense.note is None
        assert expense.paid_at == date(2026, 3, 19)

    def test_storage_failure_leaves_nothing(self, payee, debtor1, debtor2):
        with patch.object(
            ExpenseDebtor.objects, 'bulk_create', side_effect=DatabaseError('disk full')
        ):
            with pytest.raises(PersistenceError):
                create_expense(
                    creator_id=payee.id,
                    title='Cafe',
                    amount=1,
                    debtor_ids=[debtor1.id, debtor2.id],
                )

        assert Expense.objects.count() == 0
        assert ExpenseDebtor.objects.count() == 0


# =============================================================================
# set_debt_paid_status
# =============================================================================

@pytest.mark.django_db
class TestSetDebtPaidStatus:
    """Tests for set_debt_paid_status"""

    def test_mark_paid_with_note(self, debt1, debtor1):
        debt = set_debt_paid_status(
            debt_id=debt1.id,
            acting_user_id=debtor1.id,
            is_paid=True,
            note='  chuyen khoan roi  ',
        )

        debt.refresh_from_db()
        assert debt.is_paid is True
        assert debt.paid_at is not None
        assert debt.payment_note == 'chuyen khoan roi'

    def test_vietnamese_note_stored_verbatim(self, debt1, debtor1):
        set_debt_paid_status(
            debt_id=debt1.id,
            acting_user_id=debtor1.id,
            is_paid=True,
            note='đã chuyển khoản',
        )

        debt1.refresh_from_db()
        assert debt1.is_paid is True
        assert debt1.payment_note == 'đã chuyển khoản'

    def test_note_capped_at_280(self, debt1, debtor1):
        debt = set_debt_paid_status(
            debt_id=debt1.id,
            acting_user_id=debtor1.id,
            is_paid=True,
            note='x' * 500,
        )

        assert len(debt.payment_note) == 280

    def test_blank_note_stored_as_none(self, debt1, debtor1):
        debt = set_debt_paid_status(
            debt_id=debt1.id,
            acting_user_id=debtor1.id,
            is_paid=True,
            note='   ',
        )

        assert debt.payment_note is None

    def test_mark_unpaid_clears_fields_even_with_note(self, debt1, debtor1):
        set_debt_paid_status(debt_id=debt1.id, acting_user_id=debtor1.id, is_paid=True, note='paid')

        debt = set_debt_paid_status(
            debt_id=debt1.id,
            acting_user_id=debtor1.id,
            is_paid=False,
            note='ignored',
        )

        debt.refresh_from_db()
        assert debt.is_paid is False
        assert debt.paid_at is None
        assert debt.payment_note is None

    def test_paid_unpaid_paid_round_trip(self, debt1, debtor1):
        set_debt_paid_status(debt_id=debt1.id, acting_user_id=debtor1.id, is_paid=True, note='a')
        set_debt_paid_status(debt_id=debt1.id, acting_user_id=debtor1.id, is_paid=False)
        debt = set_debt_paid_status(debt_id=debt1.id, acting_user_id=debtor1.id, is_paid=True)

        assert debt.is_paid is True
        assert debt.payment_note is None

    def test_owner_cannot_toggle(self, debt1, payee):
        with pytest.raises(AuthorizationError):
            set_debt_paid_status(debt_id=debt1.id, acting_user_id=payee.id, is_paid=True)

        debt1.refresh_from_db()
        assert debt1.is_paid is False

    def test_other_debtor_cannot_toggle(self, debt1, debtor2):
        with pytest.raises(AuthorizationError):
            set_debt_paid_status(debt_id=debt1.id, acting_user_id=debtor2.id, is_paid=True)

    def test_missing_debt(self, debtor1):
        with pytest.raises(NotFoundError):
            set_debt_paid_status(debt_id=uuid.uuid4(), acting_user_id=debtor1.id, is_paid=True)

    def test_only_target_row_changes(self, debt1, debt2, debtor1):
        set_debt_paid_status(debt_id=debt1.id, acting_user_id=debtor1.id, is_paid=True)

        debt2.refresh_from_db()
        assert debt2.is_paid is False


# =============================================================================
# Read operations
# =============================================================================

@pytest.mark.django_db
class TestReads:
    """Tests for expense and debt lookups"""

    def test_owned_expenses(self, expense, payee, debtor1):
        assert list(get_owned_expenses(owner_id=payee.id)) == [expense]
        assert list(get_owned_expenses(owner_id=debtor1.id)) == []

    def test_debts_for_debtor(self, debt1, debtor1, payee):
        assert list(get_debts_for_debtor(debtor_id=debtor1.id)) == [debt1]
        assert list(get_debts_for_debtor(debtor_id=payee.id)) == []

    def test_expense_visible_to_creator_and_debtors(self, expense, payee, debtor1, outsider):
        assert get_expense_for_user(expense_id=expense.id, user_id=payee.id) == expense
        assert get_expense_for_user(expense_id=expense.id, user_id=debtor1.id) == expense

        with pytest.raises(AuthorizationError):
            get_expense_for_user(expense_id=expense.id, user_id=outsider.id)

    def test_expense_not_found(self, payee):
        with pytest.raises(NotFoundError):
            get_expense_for_user(expense_id=uuid.uuid4(), user_id=payee.id)

    def test_debt_visible_to_debtor_and_owner(self, debt1, payee, debtor1, debtor2):
        assert get_debt_for_user(debt_id=debt1.id, user_id=debtor1.id) == debt1
        assert get_debt_for_user(debt_id=debt1.id, user_id=payee.id) == debt1

        with pytest.raises(AuthorizationError):
            get_debt_for_user(debt_id=debt1.id, user_id=debtor2.id)


# =============================================================================
# Dashboard cache
# =============================================================================

@pytest.mark.django_db
class TestDashboard:
    """Tests for the cached dashboard"""

    def test_totals(self, expense, payee, debtor1):
        owner_view = build_dashboard(user=payee)
        debtor_view = build_dashboard(user=debtor1)

        assert owner_view['owed_to_me'] == Decimal('300000.00')
        assert owner_view['payment_ready'] is True
        assert debtor_view['i_owe'] == Decimal('150000.00')
        assert debtor_view['payment_ready'] is False

    def test_debt_rows_carry_payee_bank(self, expense, debtor1):
        row = build_dashboard(user=debtor1)['debts'][0]

        assert row['owner_bank_code'] == '970436'
        assert row['owner_bank_name'] == 'Vietcombank'
        assert row['owner_name'] == 'Nguyễn Văn A'
        assert row['review']['status'] == 'pending'

    def test_debt_rows_do_not_query_per_row(
        self, expense, payee, debtor1, django_assert_max_num_queries
    ):
        for title in ('Tiền điện', 'Tiền nước'):
            create_expense(creator_id=payee.id, title=title, amount=1, debtor_ids=[debtor1.id])

        with django_assert_max_num_queries(4):
            dashboard = build_dashboard(user=debtor1)

        assert len(dashboard['debts']) == 3
        assert all(row['owner_name'] == 'Nguyễn Văn A' for row in dashboard['debts'])
        assert all(row['memo'].startswith('Trần Bình ') for row in dashboard['debts'])

    def test_snapshot_is_cached(self, expense, debtor1):
        build_dashboard(user=debtor1)

        assert get_cached_dashboard(debtor1.id) is not None

    def test_toggle_invalidates_debtor_and_owner(
        self, debt1, payee, debtor1, debtor2, django_capture_on_commit_callbacks
    ):
        for user in (payee, debtor1, debtor2):
            build_dashboard(user=user)

        with django_capture_on_commit_callbacks(execute=True):
            set_debt_paid_status(debt_id=debt1.id, acting_user_id=debtor1.id, is_paid=True)

        assert get_cached_dashboard(debtor1.id) is None
        assert get_cached_dashboard(payee.id) is None
        assert get_cached_dashboard(debtor2.id) is not None

        assert build_dashboard(user=debtor1)['i_owe'] == Decimal('0')

    def test_create_invalidates_everyone_involved(
        self, payee, debtor1, outsider, django_capture_on_commit_callbacks
    ):
        for user in (payee, debtor1, outsider):
            build_dashboard(user=user)

        with django_capture_on_commit_callbacks(execute=True):
            create_expense(creator_id=payee.id, title='Cafe', amount=1, debtor_ids=[debtor1.id])

        assert get_cached_dashboard(payee.id) is None
        assert get_cached_dashboard(debtor1.id) is None
        assert get_cached_dashboard(outsider.id) is not None
