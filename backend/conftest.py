"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
from decimal import Decimal

import pytest


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def reset_app_settings():
    """
    Drop the cached GlobalSettings values after each test.

    The accessor is a process-wide singleton, so a value loaded in one test
    would otherwise leak into the next one's database.
    """
    from settings.config import app_settings

    app_settings.reload()
    yield
    app_settings.reload()


# ============================================================================
# USER FIXTURES
# ============================================================================

@pytest.fixture
def cashier(db):
    from users.models import User

    return User.objects.create_user(
        username="cashier", password="cashier-pass", role=User.Role.CASHIER
    )


@pytest.fixture
def manager(db):
    from users.models import User

    return User.objects.create_user(
        username="manager", password="manager-pass", role=User.Role.MANAGER
    )


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.get('/api/orders/')
            assert response.status_code == 401
    """
    from rest_framework.test import APIClient
    return APIClient()


def _jwt_client(user):
    from rest_framework.test import APIClient
    from rest_framework_simplejwt.tokens import RefreshToken

    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client


@pytest.fixture
def authenticated_client(cashier):
    """API client authenticated as a cashier through a JWT bearer token."""
    return _jwt_client(cashier)


@pytest.fixture
def manager_client(manager):
    return _jwt_client(manager)


# ============================================================================
# TILL FIXTURES
# ============================================================================

@pytest.fixture
def register_session(cashier):
    from terminals.models import RegisterSession

    return RegisterSession.objects.create(opened_by=cashier)


@pytest.fixture
def dining_table(db):
    from terminals.models import DiningTable

    return DiningTable.objects.create(table_number="T1", seats=4)


@pytest.fixture
def waiter(db):
    from users.models import Waiter

    return Waiter.objects.create(name="Bilal", phone="03001112222")


@pytest.fixture
def customer(db):
    from customers.models import Customer

    return Customer.objects.create(
        name="Ayesha Khan", phone="03005556666", address="House 12, Street 4"
    )


# ============================================================================
# CATALOG FIXTURES
# ============================================================================

@pytest.fixture
def mains_category(db):
    from products.models import Category

    return Category.objects.create(name="Mains", type=Category.CategoryType.MAJOR)


@pytest.fixture
def karahi_category(mains_category):
    from products.models import Category

    return Category.objects.create(
        name="Karahi", type=Category.CategoryType.SUB, parent=mains_category
    )


@pytest.fixture
def drinks_category(db):
    from products.models import Category

    return Category.objects.create(name="Drinks", type=Category.CategoryType.MAJOR)


@pytest.fixture
def size_variant(db):
    """Size with Regular (+0) and Large (+80)."""
    from products.models import Variant, VariantOption

    variant = Variant.objects.create(name="Size")
    VariantOption.objects.create(variant=variant, name="Regular", price_modifier=Decimal("0.00"), display_order=1)
    VariantOption.objects.create(variant=variant, name="Large", price_modifier=Decimal("80.00"), display_order=2)
    return variant


@pytest.fixture
def toppings_variant(db):
    """Toppings with Cheese (+50), Olives (+30) and Jalapeno (+20)."""
    from products.models import Variant, VariantOption

    variant = Variant.objects.create(name="Toppings")
    VariantOption.objects.create(variant=variant, name="Cheese", price_modifier=Decimal("50.00"), display_order=1)
    VariantOption.objects.create(variant=variant, name="Olives", price_modifier=Decimal("30.00"), display_order=2)
    VariantOption.objects.create(variant=variant, name="Jalapeno", price_modifier=Decimal("20.00"), display_order=3)
    return variant


@pytest.fixture
def karahi(karahi_category, size_variant):
    """Chicken Karahi at 450 with a required single-choice Size."""
    from products.models import MenuItem, MenuItemVariant, SelectionMode

    item = MenuItem.objects.create(
        name="Chicken Karahi", price=Decimal("450.00"), category=karahi_category, has_variants=True
    )
    MenuItemVariant.objects.create(
        menu_item=item,
        variant=size_variant,
        is_required=True,
        selection_mode=SelectionMode.SINGLE,
    )
    return item


@pytest.fixture
def pizza(mains_category, toppings_variant):
    """Pizza at 450 with optional multiple-choice Toppings."""
    from products.models import MenuItem, MenuItemVariant, SelectionMode

    item = MenuItem.objects.create(
        name="Pizza", price=Decimal("450.00"), category=mains_category, has_variants=True
    )
    MenuItemVariant.objects.create(
        menu_item=item,
        variant=toppings_variant,
        is_required=False,
        selection_mode=SelectionMode.MULTIPLE,
    )
    return item


@pytest.fixture
def tikka(mains_category):
    """Chicken Tikka at 300, no variants."""
    from products.models import MenuItem

    return MenuItem.objects.create(name="Chicken Tikka", price=Decimal("300.00"), category=mains_category)


@pytest.fixture
def soda(drinks_category):
    from products.models import MenuItem

    return MenuItem.objects.create(name="Soda", price=Decimal("100.00"), category=drinks_category)


@pytest.fixture
def family_deal(mains_category, karahi, soda):
    """Family Deal at 1200: one karahi (size must be chosen) and two sodas."""
    from products.models import Deal, DealItem

    deal = Deal.objects.create(name="Family Deal", price=Decimal("1200.00"), category=mains_category)
    DealItem.objects.create(deal=deal, menu_item=karahi, quantity=1, requires_variant_selection=True)
    DealItem.objects.create(deal=deal, menu_item=soda, quantity=2)
    return deal


# ============================================================================
# ORDER FIXTURES
# ============================================================================

@pytest.fixture
def open_order(register_session, cashier):
    """An empty take-away order."""
    from orders.services import OrderService

    return OrderService.create_order(
        order_type="take_away", register_session=register_session, created_by=cashier
    )


@pytest.fixture
def delivery_order(register_session, cashier):
    from orders.services import OrderService

    return OrderService.create_order(
        order_type="delivery",
        register_session=register_session,
        created_by=cashier,
        customer_name="Walk-in",
        customer_phone="03009998888",
        delivery_address="Block B",
        delivery_charge=Decimal("150.00"),
    )
