"""
Order App Forms
"""

from django import forms

from . import status as statuses


class OrderStatusForm(forms.Form):
    status = forms.CharField(max_length=20)
    # Admin only: act on one vendor's sub-order
    vendor_id = forms.IntegerField(required=False)


class TrackingForm(forms.Form):
    tracking_number = forms.CharField(max_length=100)
    carrier = forms.CharField(max_length=100, required=False)


class CancelOrderForm(forms.Form):
    reason = forms.CharField(required=False)


class ReturnRequestForm(forms.Form):
    item_id = forms.CharField(max_length=100)
    reason = forms.CharField()


class PaymentStatusForm(forms.Form):
    payment_status = forms.ChoiceField(choices=statuses.PAYMENT_STATUS_CHOICES)
    transaction_id = forms.CharField(max_length=100, required=False)
