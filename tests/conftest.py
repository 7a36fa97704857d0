from decimal import Decimal

import pytest

from apps.orders.services import create_order
from apps.vendors.models import Product, Vendor


@pytest.fixture(autouse=True)
def marketplace_settings(settings):
    settings.DEFAULT_COMMISSION_RATE = Decimal('10')
    settings.PAYOUT_MINIMUM_AMOUNT = Decimal('0')
    settings.ORDER_STATUS_ROLLUP = False
    settings.USE_MOCK_NOTIFICATIONS = True
    settings.EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
    settings.ADMIN_EMAILS = ['admin@example.com']
    return settings


@pytest.fixture
def make_user(django_user_model):
    counter = {'n': 0}

    def _make_user(email=None, **extra):
        counter['n'] += 1
        email = email or f'user{counter["n"]}@example.com'
        return django_user_model.objects.create_user(email=email, password='pass1234', **extra)

    return _make_user


@pytest.fixture
def customer(make_user):
    return make_user('customer@example.com', username='Nimal Perera')


@pytest.fixture
def admin_user(make_user, django_user_model):
    return make_user('boss@example.com', role=django_user_model.ROLE_ADMIN, is_staff=True)


@pytest.fixture
def make_vendor(make_user, django_user_model):
    def _make_vendor(name='Lanka Crafts', status=Vendor.STATUS_APPROVED, commission_rate=None):
        user = make_user(role=django_user_model.ROLE_VENDOR)
        vendor = Vendor.objects.create(
            user=user,
            business_name=name,
            business_email=user.email,
            business_phone='0771234567',
            business_address='12 Temple Road, Kandy',
            status=status,
        )
        if commission_rate is not None:
            vendor.wallet.commission_rate = Decimal(commission_rate)
            vendor.wallet.save()
        return vendor

    return _make_vendor


@pytest.fixture
def vendor(make_vendor):
    return make_vendor('Lanka Crafts')


@pytest.fixture
def other_vendor(make_vendor):
    return make_vendor('Batik House')


@pytest.fixture
def product(vendor):
    return Product.objects.create(
        vendor=vendor, name='Brass Lamp', price=Decimal('100.00'), stock=5, status=Product.STATUS_APPROVED
    )


@pytest.fixture
def shipping_address():
    return {'name': 'Nimal Perera', 'phone': '0711111111', 'address': '5 Lake Drive', 'city': 'Colombo'}


@pytest.fixture
def order_payload(customer, vendor, other_vendor, shipping_address):
    return {
        'customer_id': customer.pk,
        'items': [
            {'product_id': 'p1', 'vendor_id': vendor.pk, 'name': 'Brass Lamp', 'price': '100.00', 'quantity': 2},
            {'product_id': 'p2', 'vendor_id': other_vendor.pk, 'name': 'Batik Sarong', 'price': '50.00', 'quantity': 1},
            {'product_id': 'p3', 'vendor_id': vendor.pk, 'name': 'Wood Mask', 'price': '25.50', 'quantity': 1},
        ],
        'shipping_address': shipping_address,
        'shipping_cost': '10.00',
        'payment_method': 'card',
    }


@pytest.fixture
def order(order_payload):
    return create_order(order_payload)
