"""
Pytest fixtures for Stockkeeper tests.
"""

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from stockkeeper import stock
from stockkeeper.models import StorageBin, Warehouse


User = get_user_model()

PRODUCT = 101
OTHER_PRODUCT = 202


@pytest.fixture
def user(db):
    """Create a test user."""
    return User.objects.create_user(
        username='storekeeper',
        password='testpass123'
    )


@pytest.fixture
def approver(db):
    """A second user, allowed to approve what `user` creates."""
    return User.objects.create_user(
        username='manager',
        password='testpass123'
    )


@pytest.fixture
def warehouse(db):
    """Main warehouse of company 1."""
    return Warehouse.objects.create(
        code='main',
        name='Main Warehouse',
        company_id=1,
    )


@pytest.fixture
def branch(db):
    """Second warehouse of the same company."""
    return Warehouse.objects.create(
        code='north',
        name='North Branch',
        company_id=1,
    )


@pytest.fixture
def foreign_warehouse(db):
    """Warehouse of another company."""
    return Warehouse.objects.create(
        code='other-co',
        name='Other Company Store',
        company_id=2,
    )


@pytest.fixture
def storage_bin(warehouse):
    """Bin A-01 in the main warehouse."""
    return StorageBin.objects.create(warehouse=warehouse, code='A-01')


@pytest.fixture
def product_id():
    return PRODUCT


@pytest.fixture
def stocked(warehouse, user):
    """Main warehouse holding 100 of PRODUCT."""
    stock.receive(Decimal('100'), PRODUCT, warehouse, user=user, reason='Opening stock')
    return warehouse
