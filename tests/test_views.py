import json
from decimal import Decimal

import pytest
from django.urls import reverse

from apps.orders.models import Order
from apps.vendors.models import Vendor, Wallet
from apps.reviews.models import Review

pytestmark = pytest.mark.django_db


def post_json(client, url, data=None, **kwargs):
    return client.post(url, data=json.dumps(data or {}), content_type='application/json', **kwargs)


class TestVendorViews:
    def test_register_requires_login(self, client):
        response = post_json(client, reverse('vendors:register'), {})
        assert response.status_code == 401

    def test_register(self, client, customer):
        client.force_login(customer)
        response = post_json(client, reverse('vendors:register'), {
            'business_name': 'Galle Lace',
            'business_email': 'lace@example.com',
            'business_phone': '091 222 3344',
            'business_address': 'Fort, Galle',
            'account_number': '123 456',
        })

        assert response.status_code == 201
        body = response.json()
        assert body['vendor']['status'] == 'pending'
        assert body['vendor']['wallet']['bank_details']['account_number'] == '123456'

    def test_register_validation_error(self, client, customer):
        client.force_login(customer)
        response = post_json(client, reverse('vendors:register'), {'business_name': 'Galle Lace'})

        assert response.status_code == 400
        assert response.json()['code'] == 'ValidationError'

    def test_public_detail_hides_wallet(self, client, vendor):
        body = client.get(reverse('vendors:vendor_detail', args=[vendor.pk])).json()
        assert body['vendor']['business_name'] == 'Lanka Crafts'
        assert 'wallet' not in body['vendor']

    def test_unknown_vendor_is_404(self, client):
        assert client.get(reverse('vendors:vendor_detail', args=[99999])).status_code == 404

    def test_customer_cannot_open_vendor_dashboard(self, client, customer):
        client.force_login(customer)
        assert client.get(reverse('vendors:stats')).status_code == 403

    def test_payout_request(self, client, vendor):
        Wallet.objects.filter(vendor=vendor).update(available_balance=Decimal('100.00'))
        client.force_login(vendor.user)

        response = post_json(client, reverse('vendors:payouts'), {'amount': '40.00'})

        assert response.status_code == 201
        assert response.json()['payout']['amount'] == '40.00'
        assert len(client.get(reverse('vendors:payouts')).json()['payouts']) == 1

    def test_payout_over_balance_is_409(self, client, vendor):
        client.force_login(vendor.user)
        response = post_json(client, reverse('vendors:payouts'), {'amount': '40.00'})

        assert response.status_code == 409
        assert response.json()['code'] == 'InsufficientBalanceError'

    def test_pending_vendor_cannot_request_payout(self, client, make_vendor):
        pending = make_vendor('Waiting', status=Vendor.STATUS_PENDING)
        client.force_login(pending.user)
        assert post_json(client, reverse('vendors:payouts'), {'amount': '1'}).status_code == 403

    def test_admin_suspend_requires_reason(self, client, admin_user, vendor):
        client.force_login(admin_user)
        url = reverse('vendors:admin_vendor_status', args=[vendor.pk])

        assert post_json(client, url, {'status': 'suspended'}).status_code == 400

        response = post_json(client, url, {'status': 'suspended', 'reason': 'Fake items'})
        assert response.status_code == 200
        assert Vendor.objects.get(pk=vendor.pk).status == 'suspended'

    def test_admin_endpoints_reject_vendors(self, client, vendor):
        client.force_login(vendor.user)
        assert client.get(reverse('vendors:admin_vendor_list')).status_code == 403


class TestOrderViews:
    def test_checkout_uses_signed_in_customer(self, client, customer, order_payload):
        client.force_login(customer)
        order_payload['customer_id'] = 12345

        response = post_json(client, reverse('orders:orders'), order_payload)

        assert response.status_code == 201
        order = Order.objects.get()
        assert order.customer == customer
        assert len(response.json()['order']['vendor_orders']) == 2

    def test_checkout_validation_error(self, client, customer, order_payload):
        client.force_login(customer)
        order_payload['items'] = []
        assert post_json(client, reverse('orders:orders'), order_payload).status_code == 400

    def test_vendor_sees_only_own_sub_order(self, client, order, vendor):
        client.force_login(vendor.user)
        body = client.get(reverse('orders:order_detail', args=[order.order_code])).json()

        assert [vo['vendor_id'] for vo in body['order']['vendor_orders']] == [vendor.pk]

    def test_stranger_gets_404(self, client, order, make_user):
        client.force_login(make_user())
        assert client.get(reverse('orders:order_detail', args=[order.order_code])).status_code == 404

    def test_vendor_status_update(self, client, order, vendor):
        client.force_login(vendor.user)
        response = post_json(client, reverse('orders:order_status', args=[order.order_code]), {'status': 'delivered'})

        assert response.status_code == 200
        assert response.json()['vendor_order']['status'] == 'delivered'
        assert Wallet.objects.get(vendor=vendor).available_balance == Decimal('202.95')

    def test_illegal_transition_is_409(self, client, order, vendor):
        client.force_login(vendor.user)
        url = reverse('orders:order_status', args=[order.order_code])
        post_json(client, url, {'status': 'shipped'})

        response = post_json(client, url, {'status': 'pending'})
        assert response.status_code == 409
        assert response.json()['code'] == 'StateError'

    def test_tracking(self, client, order, vendor):
        client.force_login(vendor.user)
        response = post_json(client, reverse('orders:tracking', args=[order.order_code]), {'tracking_number': 'T1'})
        assert response.json()['vendor_order']['status'] == 'shipped'

    def test_customer_cancel_and_return(self, client, order, customer):
        client.force_login(customer)

        response = post_json(client, reverse('orders:returns', args=[order.order_code]),
                             {'item_id': 'p1', 'reason': 'Chipped'})
        assert response.status_code == 201

        response = post_json(client, reverse('orders:cancel', args=[order.order_code]), {'reason': 'Too slow'})
        assert response.json()['order']['order_status'] == 'cancelled'

    def test_payment_callback_is_admin_only(self, client, order, customer, admin_user):
        url = reverse('orders:payment_status', args=[order.order_code])
        client.force_login(customer)
        assert post_json(client, url, {'payment_status': 'completed'}).status_code == 403

        client.force_login(admin_user)
        response = post_json(client, url, {'payment_status': 'completed', 'transaction_id': 'PG-1'})
        assert response.json()['order']['payment_status'] == 'completed'

    def test_get_only_endpoints_reject_post(self, client, admin_user):
        client.force_login(admin_user)
        assert post_json(client, reverse('orders:admin_orders')).status_code == 405


class TestReviewViews:
    def test_submit_and_list_own(self, client, customer, product):
        client.force_login(customer)
        response = post_json(client, reverse('reviews:my_reviews'), {'product_id': product.pk, 'rating': 5})

        assert response.status_code == 201
        assert response.json()['review']['status'] == 'pending'
        assert len(client.get(reverse('reviews:my_reviews')).json()['reviews']) == 1

    def test_public_listing_hides_pending(self, client, customer, product):
        Review.objects.create(product=product, vendor=product.vendor, customer=customer, rating=5)
        body = client.get(reverse('reviews:product_reviews', args=[product.pk])).json()
        assert body['reviews'] == []

    def test_vendor_reply_only_on_own_reviews(self, client, customer, product, other_vendor):
        review = Review.objects.create(product=product, vendor=product.vendor, customer=customer, rating=2)
        url = reverse('reviews:reply', args=[review.pk])

        client.force_login(other_vendor.user)
        assert post_json(client, url, {'text': 'Hi'}).status_code == 404

        client.force_login(product.vendor.user)
        assert post_json(client, url, {'text': 'Sorry'}).json()['review']['status'] == 'approved'

    def test_admin_moderation(self, client, admin_user, customer, product):
        review = Review.objects.create(product=product, vendor=product.vendor, customer=customer, rating=2)
        client.force_login(admin_user)

        response = post_json(client, reverse('reviews:admin_review', args=[review.pk]), {'status': 'rejected'})
        assert response.json()['review']['status'] == 'rejected'

        assert client.delete(reverse('reviews:admin_review', args=[review.pk])).status_code == 200
        assert not Review.objects.exists()


class TestNotificationViews:
    def test_inbox(self, client, customer):
        from apps.notifications import templates
        from apps.notifications.services import notification_service

        notification = notification_service.notify(customer.pk, templates.vendor_approved())
        client.force_login(customer)

        body = client.get(reverse('notifications:inbox')).json()
        assert body['unread_count'] == 1
        assert body['notifications'][0]['title'] == 'Vendor Account Approved'

        post_json(client, reverse('notifications:mark_read', args=[notification.pk]))
        assert client.get(reverse('notifications:unread_count')).json()['unread_count'] == 0

    def test_inbox_requires_login(self, client):
        assert client.get(reverse('notifications:inbox')).status_code == 401


class TestSuspendedVendor:
    @pytest.fixture
    def suspended(self, vendor):
        from apps.vendors.services import update_vendor_status

        update_vendor_status(vendor.pk, Vendor.STATUS_SUSPENDED, 'Counterfeit goods')
        vendor.user.refresh_from_db()
        return vendor

    def test_cannot_fulfil_orders(self, client, order, suspended):
        client.force_login(suspended.user)
        response = post_json(client, reverse('orders:order_status', args=[order.order_code]), {'status': 'delivered'})

        assert response.status_code == 404
        assert order.vendor_orders.get(vendor=suspended).status == 'pending'
        assert Wallet.objects.get(vendor=suspended).available_balance == Decimal('0.00')

    def test_cannot_add_tracking(self, client, order, suspended):
        client.force_login(suspended.user)
        response = post_json(client, reverse('orders:tracking', args=[order.order_code]), {'tracking_number': 'T1'})
        assert response.status_code == 403

    def test_dashboard_is_closed(self, client, suspended):
        client.force_login(suspended.user)
        assert client.get(reverse('vendors:stats')).status_code == 403
        assert client.get(reverse('orders:vendor_orders')).status_code == 403

    def test_reinstated_vendor_can_fulfil_again(self, client, order, suspended):
        from apps.vendors.services import update_vendor_status

        update_vendor_status(suspended.pk, Vendor.STATUS_APPROVED)
        client.force_login(suspended.user)
        response = post_json(client, reverse('orders:order_status', args=[order.order_code]), {'status': 'shipped'})
        assert response.status_code == 200


class TestReviewOwnership:
    def test_author_deletes_own_review(self, client, customer, product):
        review = Review.objects.create(product=product, vendor=product.vendor, customer=customer, rating=4)
        client.force_login(customer)

        assert client.delete(reverse('reviews:my_review', args=[review.pk])).status_code == 200
        assert not Review.objects.filter(pk=review.pk).exists()

    def test_cannot_delete_someone_elses_review(self, client, customer, make_user, product):
        review = Review.objects.create(product=product, vendor=product.vendor, customer=customer, rating=4)
        client.force_login(make_user())

        assert client.delete(reverse('reviews:my_review', args=[review.pk])).status_code == 404
        assert Review.objects.filter(pk=review.pk).exists()

    def test_vendor_moderates_own_reviews(self, client, customer, product, other_vendor):
        review = Review.objects.create(product=product, vendor=product.vendor, customer=customer, rating=2)
        url = reverse('reviews:vendor_review_status', args=[review.pk])

        client.force_login(other_vendor.user)
        assert post_json(client, url, {'status': 'approved'}).status_code == 404

        client.force_login(product.vendor.user)
        response = post_json(client, url, {'status': 'approved'})
        assert response.json()['review']['status'] == 'approved'
