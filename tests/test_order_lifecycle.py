from decimal import Decimal

import pytest

from apps.orders.models import Order, VendorOrder
from apps.orders.services import (
    add_tracking_info,
    cancel_order,
    request_return,
    update_order_status,
    update_payment_status,
)
from apps.vendors.models import Transaction, Wallet
from core.exceptions import NotFoundError, StateError, ValidationError

pytestmark = pytest.mark.django_db


def wallet_of(vendor):
    return Wallet.objects.get(vendor=vendor)


class TestVendorOrderStatus:
    def test_vendor_moves_only_own_sub_order(self, order, vendor, other_vendor):
        vendor_order = update_order_status(order.order_code, 'confirmed', acting_vendor_id=vendor.pk)

        assert isinstance(vendor_order, VendorOrder)
        assert vendor_order.status == 'confirmed'
        assert vendor_order.status_updated_at is not None
        assert VendorOrder.objects.get(order=order, vendor=other_vendor).status == 'pending'
        assert Order.objects.get(pk=order.pk).order_status == 'pending'

    def test_forward_skip_allowed(self, order, vendor):
        assert update_order_status(order.pk, 'shipped', acting_vendor_id=vendor.pk).status == 'shipped'

    def test_backward_move_rejected(self, order, vendor):
        update_order_status(order.pk, 'shipped', acting_vendor_id=vendor.pk)
        with pytest.raises(StateError):
            update_order_status(order.pk, 'confirmed', acting_vendor_id=vendor.pk)

    def test_unknown_status(self, order, vendor):
        with pytest.raises(ValidationError):
            update_order_status(order.pk, 'lost', acting_vendor_id=vendor.pk)

    def test_vendor_not_on_order(self, order, make_vendor):
        stranger = make_vendor('Stranger')
        with pytest.raises(NotFoundError):
            update_order_status(order.pk, 'confirmed', acting_vendor_id=stranger.pk)

    def test_unknown_order(self, vendor):
        with pytest.raises(NotFoundError):
            update_order_status('NOPE', 'confirmed', acting_vendor_id=vendor.pk)

    def test_overall_status_without_vendor(self, order):
        updated = update_order_status(order.pk, 'processing')

        assert isinstance(updated, Order)
        assert updated.order_status == 'processing'
        assert set(updated.vendor_orders.values_list('status', flat=True)) == {'pending'}


class TestDeliveryCredit:
    def test_delivery_credits_wallet_net_of_commission(self, order, vendor):
        vendor_order = update_order_status(order.pk, 'delivered', acting_vendor_id=vendor.pk)

        wallet = wallet_of(vendor)
        assert vendor_order.delivered_at is not None
        assert wallet.total_sales == Decimal('225.50')
        assert wallet.total_earnings == Decimal('202.95')
        assert wallet.available_balance == Decimal('202.95')

        credit = Transaction.objects.get(vendor_order=vendor_order)
        assert credit.status == Transaction.STATUS_COMPLETED
        assert credit.metadata == {
            'gross': '225.50', 'fee': '22.55', 'net': '202.95', 'commission_rate': '10.00',
        }
        assert credit.balance_before == Decimal('0.00')
        assert credit.balance_after == Decimal('202.95')

    def test_vendor_commission_rate_is_used(self, order, other_vendor):
        wallet = wallet_of(other_vendor)
        wallet.commission_rate = Decimal('15.00')
        wallet.save()

        update_order_status(order.pk, 'delivered', acting_vendor_id=other_vendor.pk)

        assert wallet_of(other_vendor).available_balance == Decimal('42.50')

    def test_second_delivery_is_rejected_and_credits_once(self, order, vendor):
        update_order_status(order.pk, 'delivered', acting_vendor_id=vendor.pk)
        with pytest.raises(StateError):
            update_order_status(order.pk, 'delivered', acting_vendor_id=vendor.pk)

        assert Transaction.objects.filter(transaction_type='credit').count() == 1
        assert wallet_of(vendor).available_balance == Decimal('202.95')

    def test_other_vendor_wallet_untouched(self, order, vendor, other_vendor):
        update_order_status(order.pk, 'delivered', acting_vendor_id=vendor.pk)
        assert wallet_of(other_vendor).available_balance == Decimal('0.00')

    def test_rollup_when_enabled(self, order, vendor, other_vendor, settings):
        settings.ORDER_STATUS_ROLLUP = True

        update_order_status(order.pk, 'delivered', acting_vendor_id=vendor.pk)
        assert Order.objects.get(pk=order.pk).order_status == 'pending'

        update_order_status(order.pk, 'delivered', acting_vendor_id=other_vendor.pk)
        assert Order.objects.get(pk=order.pk).order_status == 'delivered'

    def test_no_rollup_by_default(self, order, vendor, other_vendor):
        update_order_status(order.pk, 'delivered', acting_vendor_id=vendor.pk)
        update_order_status(order.pk, 'delivered', acting_vendor_id=other_vendor.pk)
        assert Order.objects.get(pk=order.pk).order_status == 'pending'


class TestPaymentStatus:
    def test_completed_payment_books_pending_balances(self, order, vendor, other_vendor):
        updated = update_payment_status(order.order_code, 'completed', 'TXN-1')

        assert updated.payment_status == 'completed'
        assert updated.transaction_id == 'TXN-1'
        assert updated.paid_at is not None
        assert wallet_of(vendor).pending_balance == Decimal('202.95')
        assert wallet_of(other_vendor).pending_balance == Decimal('45.00')
        assert wallet_of(vendor).available_balance == Decimal('0.00')

    def test_repeat_payment_callback_books_once(self, order, vendor):
        update_payment_status(order.pk, 'completed')
        update_payment_status(order.pk, 'completed')
        assert wallet_of(vendor).pending_balance == Decimal('202.95')

    def test_delivery_moves_pending_to_available(self, order, vendor):
        update_payment_status(order.pk, 'completed')
        update_order_status(order.pk, 'delivered', acting_vendor_id=vendor.pk)

        wallet = wallet_of(vendor)
        assert wallet.pending_balance == Decimal('0.00')
        assert wallet.available_balance == Decimal('202.95')
        assert Transaction.objects.filter(wallet=wallet).count() == 1

    def test_cancelling_sub_order_releases_pending(self, order, vendor):
        update_payment_status(order.pk, 'completed')
        update_order_status(order.pk, 'cancelled', acting_vendor_id=vendor.pk)

        assert wallet_of(vendor).pending_balance == Decimal('0.00')
        assert Transaction.objects.get(wallet__vendor=vendor).status == Transaction.STATUS_CANCELLED

    def test_unknown_payment_status(self, order):
        with pytest.raises(ValidationError):
            update_payment_status(order.pk, 'stolen')


class TestTracking:
    def test_tracking_marks_shipped(self, order, vendor):
        vendor_order = add_tracking_info(order.order_code, vendor.pk, 'TRK123', 'Pronto')

        assert vendor_order.status == 'shipped'
        assert vendor_order.tracking_number == 'TRK123'
        assert vendor_order.carrier == 'Pronto'

    def test_tracking_on_shipped_only_replaces_tracking(self, order, vendor):
        add_tracking_info(order.pk, vendor.pk, 'TRK123')
        vendor_order = add_tracking_info(order.pk, vendor.pk, 'TRK999', 'DHL')

        assert vendor_order.status == 'shipped'
        assert VendorOrder.objects.get(pk=vendor_order.pk).tracking_number == 'TRK999'

    def test_tracking_required(self, order, vendor):
        with pytest.raises(ValidationError):
            add_tracking_info(order.pk, vendor.pk, '  ')

    def test_tracking_on_delivered_rejected(self, order, vendor):
        update_order_status(order.pk, 'delivered', acting_vendor_id=vendor.pk)
        with pytest.raises(StateError):
            add_tracking_info(order.pk, vendor.pk, 'TRK123')


class TestCancelAndReturn:
    def test_cancel_records_who_and_why(self, order, customer):
        cancelled = cancel_order(order.pk, 'Changed my mind', customer.pk)

        assert cancelled.order_status == 'cancelled'
        assert cancelled.cancellation['reason'] == 'Changed my mind'
        assert cancelled.cancellation['cancelled_by'] == str(customer.pk)
        assert cancelled.cancellation['cancelled_at']

    def test_cancel_twice_rejected(self, order, customer):
        cancel_order(order.pk, 'first', customer.pk)
        with pytest.raises(StateError):
            cancel_order(order.pk, 'second', customer.pk)

    def test_cancel_does_not_touch_sub_orders(self, order, customer):
        cancel_order(order.pk, '', customer.pk)
        assert set(VendorOrder.objects.filter(order=order).values_list('status', flat=True)) == {'pending'}

    def test_return_request_appended(self, order):
        record = request_return(order.pk, 'p2', 'Wrong colour')
        request_return(order.pk, 'p1', 'Cracked')

        returns = Order.objects.get(pk=order.pk).returns
        assert record['status'] == 'requested'
        assert [r['item_id'] for r in returns] == ['p2', 'p1']

    def test_return_unknown_item(self, order):
        with pytest.raises(NotFoundError):
            request_return(order.pk, 'p99', 'Wrong colour')

    def test_return_needs_reason(self, order):
        with pytest.raises(ValidationError):
            request_return(order.pk, 'p1', '')
