from decimal import Decimal

import pytest
from django.urls import reverse

from apps.reviews.models import Review
from apps.users.models import CustomUser
from apps.vendors.models import Transaction, Vendor

pytestmark = pytest.mark.django_db


@pytest.fixture
def superuser_client(client, django_user_model):
    superuser = django_user_model.objects.create_superuser(email='root@example.com', password='pass1234')
    client.force_login(superuser)
    return client


@pytest.mark.parametrize('model_url', [
    'users/customuser',
    'vendors/vendor',
    'vendors/wallet',
    'vendors/transaction',
    'vendors/payout',
    'vendors/product',
    'vendors/vendorgroup',
    'orders/order',
    'orders/vendororder',
    'reviews/review',
    'notifications/notification',
])
def test_changelists_render(superuser_client, order, product, model_url):
    response = superuser_client.get(f'/admin/{model_url}/')
    assert response.status_code == 200


def test_change_pages_render(superuser_client, order, vendor):
    assert superuser_client.get(reverse('admin:orders_order_change', args=[order.pk])).status_code == 200
    assert superuser_client.get(reverse('admin:vendors_vendor_change', args=[vendor.pk])).status_code == 200
    assert superuser_client.get(reverse('admin:users_customuser_change', args=[vendor.user.pk])).status_code == 200


def test_ledger_is_read_only(superuser_client):
    assert superuser_client.get(reverse('admin:vendors_transaction_add')).status_code == 403


def test_suspend_vendor_action(superuser_client, vendor):
    superuser_client.post(reverse('admin:vendors_vendor_changelist'), {
        'action': 'suspend_vendors',
        '_selected_action': [vendor.pk],
    })
    assert Vendor.objects.get(pk=vendor.pk).status == Vendor.STATUS_SUSPENDED


def test_rebuild_wallet_action(superuser_client, order, vendor):
    from apps.orders.services import update_order_status

    update_order_status(order.pk, 'delivered', acting_vendor_id=vendor.pk)
    vendor.wallet.__class__.objects.filter(pk=vendor.wallet.pk).update(available_balance=Decimal('0'))

    superuser_client.post(reverse('admin:vendors_wallet_changelist'), {
        'action': 'rebuild_balances',
        '_selected_action': [vendor.wallet.pk],
    })

    vendor.wallet.refresh_from_db()
    assert vendor.wallet.available_balance == Decimal('202.95')
    assert Transaction.objects.filter(wallet=vendor.wallet).count() == 1


def test_approve_review_action(superuser_client, customer, product):
    review = Review.objects.create(product=product, vendor=product.vendor, customer=customer, rating=4)
    superuser_client.post(reverse('admin:reviews_review_changelist'), {
        'action': 'approve_reviews',
        '_selected_action': [review.pk],
    })
    assert Review.objects.get(pk=review.pk).status == Review.STATUS_APPROVED


def test_user_suspend_action_skips_vendors(superuser_client, customer, vendor):
    superuser_client.post(reverse('admin:users_customuser_changelist'), {
        'action': 'suspend_users',
        '_selected_action': [customer.pk, vendor.user.pk],
    })
    assert CustomUser.objects.get(pk=customer.pk).status == CustomUser.STATUS_SUSPENDED
    assert CustomUser.objects.get(pk=vendor.user.pk).status == CustomUser.STATUS_ACTIVE
