import pytest
from decimal import Decimal
from django.core.cache import cache
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, Profile
from apps.ledger.services import create_expense, set_debt_paid_status
from apps.ledger.services.bank_directory import BANK_DIRECTORY_CACHE_KEY


def _member(email, display_name, **bank):
    user = User.objects.create_user(
        email=email,
        password='TestPass123!',
        display_name=display_name,
    )
    Profile.objects.create(
        user=user,
        display_name=display_name,
        email=email,
        bank_code=bank.get('bank_code', ''),
        bank_account_number=bank.get('bank_account_number', ''),
        bank_owner_name=bank.get('bank_owner_name', ''),
    )
    return user


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


SAMPLE_BANKS = [
    {
        "id": 43,
        "name": "Ngân hàng TMCP Ngoại Thương Việt Nam",
        "code": "VCB",
        "bin": "970436",
        "shortName": "Vietcombank",
        "logo": "https://api.vietqr.io/img/VCB.png",
    },
    {
        "id": 21,
        "name": "Ngân hàng TMCP Quân đội",
        "code": "MB",
        "bin": "970422",
        "shortName": "MBBank",
        "logo": "https://api.vietqr.io/img/MB.png",
    },
]


@pytest.fixture(autouse=True)
def ledger_cache():
    """
    Start every test with an empty cache and a seeded bank directory
    so dashboards never reach the network.
    """
    cache.clear()
    cache.set(BANK_DIRECTORY_CACHE_KEY, SAMPLE_BANKS)
    yield
    cache.clear()


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def payee(db):
    """The member who pays and is owed; bank details complete."""
    return _member(
        'payee@example.com',
        'Nguyễn Văn A',
        bank_code='970436',
        bank_account_number='0123 4567 89',
        bank_owner_name='Nguyễn Văn A',
    )


@pytest.fixture
def debtor1(db):
    """First debtor."""
    return _member('debtor1@example.com', 'Trần Bình')


@pytest.fixture
def debtor2(db):
    """Second debtor."""
    return _member('debtor2@example.com', 'Lê Chi')


@pytest.fixture
def outsider(db):
    """A member who is neither payee nor debtor."""
    return _member('outsider@example.com', 'Outsider')


@pytest.fixture
def payee_client(payee):
    """Return API client authenticated as the payee."""
    return _client_for(payee)


@pytest.fixture
def debtor1_client(debtor1):
    """Return API client authenticated as debtor1."""
    return _client_for(debtor1)


@pytest.fixture
def debtor2_client(debtor2):
    """Return API client authenticated as debtor2."""
    return _client_for(debtor2)


@pytest.fixture
def outsider_client(outsider):
    """Return API client authenticated as the outsider."""
    return _client_for(outsider)


@pytest.fixture
def expense(payee, debtor1, debtor2):
    """A 150000 expense owed in full by both debtors."""
    return create_expense(
        creator_id=payee.id,
        title='Tiền nhà',
        amount=Decimal('150000'),
        debtor_ids=[debtor1.id, debtor2.id],
    )


@pytest.fixture
def debt1(expense, debtor1):
    """debtor1's obligation on the expense."""
    return expense.debtors.get(debtor=debtor1)


@pytest.fixture
def debt2(expense, debtor2):
    """debtor2's obligation on the expense."""
    return expense.debtors.get(debtor=debtor2)


@pytest.fixture
def paid_debt1(debt1, debtor1):
    """debt1 after debtor1 marked it paid."""
    return set_debt_paid_status(
        debt_id=debt1.id,
        acting_user_id=debtor1.id,
        is_paid=True,
        note='đã chuyển khoản',
    )
