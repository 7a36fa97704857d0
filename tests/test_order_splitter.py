from decimal import Decimal
from unittest import mock

import pytest
from django.db import IntegrityError

from apps.orders.models import Order, VendorOrder
from apps.orders.services import create_order, get_order, list_customer_orders, list_vendor_orders
from apps.orders.services import splitter
from core.exceptions import NotFoundError, PersistenceError, ValidationError

pytestmark = pytest.mark.django_db


class TestCreateOrder:
    def test_splits_items_by_vendor_in_first_seen_order(self, order, vendor, other_vendor):
        vendor_orders = list(order.vendor_orders.all())

        assert [vo.vendor_id for vo in vendor_orders] == [vendor.pk, other_vendor.pk]
        assert [len(vo.items) for vo in vendor_orders] == [2, 1]
        assert vendor_orders[0].subtotal == Decimal('225.50')
        assert vendor_orders[1].subtotal == Decimal('50.00')
        assert all(vo.status == 'pending' for vo in vendor_orders)

    def test_two_vendor_cart_split(self, customer, vendor, other_vendor, shipping_address):
        order = create_order({
            'customer_id': customer.pk,
            'items': [
                {'product_id': 'lamp', 'vendor_id': vendor.pk, 'name': 'Brass Lamp', 'price': '500', 'quantity': 2},
                {'product_id': 'mask', 'vendor_id': other_vendor.pk, 'name': 'Raksha Mask', 'price': '2000',
                 'quantity': 1},
            ],
            'shipping_address': shipping_address,
        })

        assert order.subtotal == Decimal('3000.00')
        vendor_orders = list(order.vendor_orders.all())
        assert [(vo.vendor_id, vo.subtotal) for vo in vendor_orders] == [
            (vendor.pk, Decimal('1000.00')),
            (other_vendor.pk, Decimal('2000.00')),
        ]
        assert [vo.status for vo in vendor_orders] == ['pending', 'pending']

    def test_totals(self, order):
        assert order.subtotal == Decimal('275.50')
        assert order.total_amount == Decimal('285.50')
        assert order.order_status == 'pending'
        assert order.payment_status == 'pending'

    def test_snapshots_customer_and_items(self, order, customer):
        assert order.customer == customer
        assert order.customer_email == 'customer@example.com'
        assert order.items[0]['price'] == '100.00'
        assert order.items[0]['image'] is None
        assert order.link == f'/orders/{order.order_code}'

    def test_vendor_name_falls_back_to_business_name(self, order):
        assert order.vendor_orders.first().vendor_name == 'Lanka Crafts'

    def test_guest_checkout_with_email(self, order_payload):
        del order_payload['customer_id']
        order_payload['customer_email'] = 'guest@example.com'

        order = create_order(order_payload)

        assert order.customer is None
        assert order.customer_email == 'guest@example.com'

    def test_requires_customer(self, order_payload):
        del order_payload['customer_id']
        with pytest.raises(ValidationError):
            create_order(order_payload)

    def test_unknown_customer(self, order_payload):
        order_payload['customer_id'] = 99999
        with pytest.raises(ValidationError):
            create_order(order_payload)

    def test_empty_items(self, order_payload):
        order_payload['items'] = []
        with pytest.raises(ValidationError):
            create_order(order_payload)

    @pytest.mark.parametrize('quantity', [0, -1, 1.5, 'two', None])
    def test_bad_quantity(self, order_payload, quantity):
        order_payload['items'][0]['quantity'] = quantity
        with pytest.raises(ValidationError):
            create_order(order_payload)

    def test_missing_vendor_id(self, order_payload):
        del order_payload['items'][0]['vendor_id']
        with pytest.raises(ValidationError):
            create_order(order_payload)

    def test_unknown_vendor(self, order_payload):
        order_payload['items'][0]['vendor_id'] = 99999
        with pytest.raises(ValidationError, match='Unknown vendor'):
            create_order(order_payload)
        assert not Order.objects.exists()

    def test_missing_address_fields(self, order_payload):
        order_payload['shipping_address'] = {'name': 'Nimal'}
        with pytest.raises(ValidationError):
            create_order(order_payload)

    def test_subtotal_mismatch(self, order_payload):
        order_payload['subtotal'] = '200.00'
        with pytest.raises(ValidationError, match='subtotal'):
            create_order(order_payload)

    def test_matching_totals_accepted(self, order_payload):
        order_payload['subtotal'] = '275.50'
        order_payload['total_amount'] = '285.50'
        assert create_order(order_payload).total_amount == Decimal('285.50')

    def test_total_mismatch(self, order_payload):
        order_payload['total_amount'] = '1.00'
        with pytest.raises(ValidationError, match='total_amount'):
            create_order(order_payload)

    def test_emits_order_placed_after_commit(self, order_payload, django_capture_on_commit_callbacks):
        received = []

        def listener(sender, order, **kwargs):
            received.append(order.order_code)

        from apps.notifications import events
        events.order_placed.connect(listener)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                order = create_order(order_payload)
        finally:
            events.order_placed.disconnect(listener)

        assert received == [order.order_code]


class TestOrderCodeCollision:
    def test_regenerates_code_on_collision(self, order, order_payload):
        codes = iter([order.order_code, 'ARFRESHCODE1'])
        with mock.patch.object(splitter, 'generate_order_code', side_effect=lambda: next(codes)):
            second = create_order(order_payload)

        assert second.order_code == 'ARFRESHCODE1'
        assert Order.objects.count() == 2

    def test_gives_up_after_max_attempts(self, order, order_payload, settings):
        settings.ORDER_CODE_MAX_ATTEMPTS = 2
        with mock.patch.object(splitter, 'generate_order_code', return_value=order.order_code):
            with pytest.raises(PersistenceError):
                create_order(order_payload)

        assert Order.objects.count() == 1
        assert VendorOrder.objects.count() == 2

    def test_other_integrity_errors_are_persistence_errors(self, order_payload):
        with mock.patch.object(VendorOrder.objects, 'bulk_create', side_effect=IntegrityError('boom')):
            with pytest.raises(PersistenceError):
                create_order(order_payload)
        assert not Order.objects.exists()


class TestLookups:
    def test_get_by_code_and_pk(self, order):
        assert get_order(order.order_code) == order
        assert get_order(order.pk) == order
        assert get_order(str(order.pk)) == order

    def test_get_unknown(self):
        with pytest.raises(NotFoundError):
            get_order('NOPE')

    def test_customer_orders(self, order, customer):
        assert list_customer_orders(customer.pk) == [order]

    def test_vendor_orders(self, order, vendor):
        vendor_orders = list_vendor_orders(vendor.pk)
        assert len(vendor_orders) == 1
        assert vendor_orders[0].order == order
        assert list_vendor_orders(vendor.pk, status='shipped') == []

    def test_vendor_orders_unknown_status(self, vendor):
        with pytest.raises(ValidationError):
            list_vendor_orders(vendor.pk, status='lost')
