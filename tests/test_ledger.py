from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command

from apps.orders.services import create_order, update_order_status, update_payment_status
from apps.vendors.models import Payout, Product, Transaction, VendorGroup, VendorGroupMembership, Wallet
from apps.vendors.services import (
    compute_settlement,
    credit_vendor_order,
    expand_vendor_ids,
    get_vendor_stats,
    list_vendor_payouts,
    process_vendor_payout,
    recompute_wallet,
    resolve_commission_rate,
)
from core.exceptions import InsufficientBalanceError, NotFoundError, ValidationError


def fund(vendor, amount):
    Wallet.objects.filter(vendor=vendor).update(available_balance=Decimal(amount))


class TestSettlement:
    def test_default_rate(self):
        settlement = compute_settlement('100.00')
        assert (settlement.fee, settlement.net) == (Decimal('10.00'), Decimal('90.00'))

    def test_explicit_rate(self):
        settlement = compute_settlement(Decimal('19.99'), Decimal('7.5'))
        assert settlement.fee == Decimal('1.50')
        assert settlement.net == Decimal('18.49')
        assert settlement.fee + settlement.net == settlement.gross

    def test_negative_gross_rejected(self):
        with pytest.raises(ValidationError):
            compute_settlement('-1')

    def test_rate_out_of_range(self):
        with pytest.raises(ValidationError):
            compute_settlement('10', Decimal('101'))

    @pytest.mark.django_db
    def test_rate_from_vendor_wallet(self, make_vendor):
        vendor = make_vendor(commission_rate='12.50')
        assert resolve_commission_rate(vendor) == Decimal('12.50')
        assert resolve_commission_rate(vendor.wallet) == Decimal('12.50')


@pytest.mark.django_db
class TestPayouts:
    def test_payout_debits_available_balance(self, vendor):
        fund(vendor, '500.00')

        payout = process_vendor_payout(vendor.pk, '120.00', {'notes': 'Weekly'})

        wallet = Wallet.objects.get(vendor=vendor)
        assert payout.status == Payout.STATUS_PENDING
        assert payout.reference.startswith('PAYOUT_')
        assert payout.notes == 'Weekly'
        assert payout.payout_method == 'bank_transfer'
        assert wallet.available_balance == Decimal('380.00')
        assert wallet.total_withdrawn == Decimal('120.00')

        debit = Transaction.objects.get(payout=payout)
        assert debit.transaction_type == Transaction.TYPE_PAYOUT
        assert (debit.balance_before, debit.balance_after) == (Decimal('500.00'), Decimal('380.00'))

    def test_full_balance_can_be_withdrawn(self, vendor):
        fund(vendor, '75.00')
        process_vendor_payout(vendor.pk, '75.00')
        assert Wallet.objects.get(vendor=vendor).available_balance == Decimal('0.00')

    def test_insufficient_balance(self, vendor):
        fund(vendor, '50.00')
        with pytest.raises(InsufficientBalanceError) as excinfo:
            process_vendor_payout(vendor.pk, '50.01')

        assert excinfo.value.available == Decimal('50.00')
        assert not Payout.objects.exists()
        assert Wallet.objects.get(vendor=vendor).available_balance == Decimal('50.00')

    @pytest.mark.parametrize('amount', ['0', '-5'])
    def test_non_positive_amount(self, vendor, amount):
        with pytest.raises(ValidationError):
            process_vendor_payout(vendor.pk, amount)

    def test_minimum_amount(self, vendor, settings):
        settings.PAYOUT_MINIMUM_AMOUNT = Decimal('1000')
        fund(vendor, '5000.00')
        with pytest.raises(ValidationError):
            process_vendor_payout(vendor.pk, '999.99')

    def test_unknown_vendor(self):
        with pytest.raises(NotFoundError):
            process_vendor_payout(99999, '10')

    def test_bank_details_snapshot(self, vendor):
        Wallet.objects.filter(vendor=vendor).update(
            account_name='Lanka Crafts', account_number='001122', bank_name='BOC', available_balance=100
        )
        payout = process_vendor_payout(vendor.pk, '10')
        assert payout.bank_details['account_number'] == '001122'

    def test_list_payouts(self, vendor):
        fund(vendor, '100.00')
        process_vendor_payout(vendor.pk, '10')
        process_vendor_payout(vendor.pk, '20')
        assert {p.amount for p in list_vendor_payouts(vendor.pk)} == {Decimal('10.00'), Decimal('20.00')}


@pytest.mark.django_db
class TestVendorStats:
    def test_single_vendor(self, order, vendor):
        Product.objects.create(vendor=vendor, name='A', price=1, status=Product.STATUS_APPROVED)
        Product.objects.create(vendor=vendor, name='B', price=1)
        update_order_status(order.pk, 'delivered', acting_vendor_id=vendor.pk)

        stats = get_vendor_stats(vendor.pk)

        assert stats['vendor_ids'] == [vendor.pk]
        assert stats['available_balance'] == Decimal('202.95')
        assert stats['total_sales'] == Decimal('225.50')
        assert stats['total_products'] == 2
        assert stats['active_products'] == 1

    def test_group_members_are_aggregated(self, vendor, other_vendor, make_vendor):
        unrelated = make_vendor('Unrelated')
        group = VendorGroup.objects.create(name='Lanka Group')
        VendorGroupMembership.objects.create(group=group, vendor=vendor, is_primary=True)
        VendorGroupMembership.objects.create(group=group, vendor=other_vendor)
        fund(vendor, '10.00')
        fund(other_vendor, '5.00')
        fund(unrelated, '1000.00')

        assert expand_vendor_ids(other_vendor.pk) == [other_vendor.pk, vendor.pk]
        stats = get_vendor_stats(other_vendor.pk)
        assert stats['available_balance'] == Decimal('15.00')
        assert set(stats['vendor_ids']) == {vendor.pk, other_vendor.pk}

    def test_rating_from_record_with_most_reviews(self, vendor, other_vendor):
        type(vendor).objects.filter(pk=vendor.pk).update(rating=Decimal('4.0'), review_count=2)
        type(vendor).objects.filter(pk=other_vendor.pk).update(rating=Decimal('3.0'), review_count=5)

        stats = get_vendor_stats([vendor.pk, other_vendor.pk])

        assert stats['rating'] == Decimal('3.0')
        assert stats['review_count'] == 7

    def test_rating_tie_goes_to_first_id(self, vendor, other_vendor):
        type(vendor).objects.filter(pk=vendor.pk).update(rating=Decimal('4.0'), review_count=2)
        type(vendor).objects.filter(pk=other_vendor.pk).update(rating=Decimal('3.0'), review_count=2)

        assert get_vendor_stats([other_vendor.pk, vendor.pk])['rating'] == Decimal('3.0')

    def test_unknown_vendor(self):
        with pytest.raises(NotFoundError):
            get_vendor_stats(99999)

    def test_invalid_id(self):
        with pytest.raises(ValidationError):
            get_vendor_stats('abc')


@pytest.mark.django_db
@pytest.mark.django_db
class TestDeliverySettlement:
    @pytest.fixture
    def thousand_order(self, customer, vendor, shipping_address):
        return create_order({
            'customer_id': customer.pk,
            'items': [{'product_id': 'lamp', 'vendor_id': vendor.pk, 'name': 'Brass Lamp', 'price': '500',
                       'quantity': 2}],
            'shipping_address': shipping_address,
        })

    def test_deliver_then_withdraw_everything(self, thousand_order, vendor):
        update_order_status(thousand_order.pk, 'delivered', acting_vendor_id=vendor.pk)

        wallet = Wallet.objects.get(vendor=vendor)
        assert wallet.available_balance == Decimal('900.00')
        assert wallet.total_earnings == Decimal('900.00')

        process_vendor_payout(vendor.pk, '900')
        assert Wallet.objects.get(vendor=vendor).available_balance == Decimal('0.00')

        with pytest.raises(InsufficientBalanceError):
            process_vendor_payout(vendor.pk, '0.01')

    def test_second_credit_is_ignored(self, thousand_order, vendor):
        vendor_order = thousand_order.vendor_orders.get()

        assert credit_vendor_order(vendor_order) is not None
        assert credit_vendor_order(vendor_order) is None

        wallet = Wallet.objects.get(vendor=vendor)
        assert wallet.available_balance == Decimal('900.00')
        assert Transaction.objects.filter(vendor_order=vendor_order).count() == 1


class TestReconciliation:
    def test_recompute_matches_running_totals(self, order, vendor):
        update_payment_status(order.pk, 'completed')
        update_order_status(order.pk, 'delivered', acting_vendor_id=vendor.pk)
        process_vendor_payout(vendor.pk, '2.95')

        wallet = Wallet.objects.get(vendor=vendor)
        totals = recompute_wallet(wallet, save=False)

        assert totals == {
            'total_sales': wallet.total_sales,
            'total_earnings': wallet.total_earnings,
            'pending_balance': wallet.pending_balance,
            'total_withdrawn': wallet.total_withdrawn,
            'available_balance': wallet.available_balance,
        }
        assert totals['available_balance'] == Decimal('200.00')

    def test_command_repairs_drift(self, order, vendor):
        update_order_status(order.pk, 'delivered', acting_vendor_id=vendor.pk)
        Wallet.objects.filter(vendor=vendor).update(available_balance=Decimal('1.00'))

        out = StringIO()
        call_command('rebuild_wallet_balances', '--dry-run', stdout=out)
        assert Wallet.objects.get(vendor=vendor).available_balance == Decimal('1.00')
        assert '1 of' in out.getvalue()

        call_command('rebuild_wallet_balances', stdout=StringIO())
        assert Wallet.objects.get(vendor=vendor).available_balance == Decimal('202.95')
