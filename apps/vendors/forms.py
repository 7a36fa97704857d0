"""
Vendor App Forms
Input validation for registration, profile, payout and admin status views
"""

from decimal import Decimal
import re

from django import forms
from django.conf import settings

from core.exceptions import ValidationError as ServiceValidationError
from .models import Product, Vendor


def form_errors(form) -> ServiceValidationError:
    """Collapse a bound form's errors into one service ValidationError"""
    messages = []
    for field, errors in form.errors.items():
        label = 'form' if field == '__all__' else field
        messages.extend(f'{label}: {error}' for error in errors)
    return ServiceValidationError('; '.join(messages), fields=list(form.errors))


# ==========================================
# REGISTRATION & PROFILE
# ==========================================

class VendorRegistrationForm(forms.Form):
    """New vendor application"""

    business_name = forms.CharField(max_length=200)
    business_email = forms.EmailField()
    business_phone = forms.CharField(max_length=20)
    business_address = forms.CharField()
    business_description = forms.CharField(required=False)
    business_type = forms.CharField(max_length=50, required=False)
    tax_id = forms.CharField(max_length=50, required=False)

    # Bank payout details
    account_name = forms.CharField(max_length=200, required=False)
    account_number = forms.CharField(max_length=30, required=False)
    bank_name = forms.CharField(max_length=100, required=False)
    branch_code = forms.CharField(max_length=20, required=False)

    # Verification document URLs
    business_registration = forms.URLField(max_length=500, required=False)
    identity_document = forms.URLField(max_length=500, required=False)

    DOCUMENT_FIELDS = ('business_registration', 'identity_document')

    def clean_business_phone(self):
        phone = re.sub(r'[\s\-()]', '', self.cleaned_data['business_phone'])
        if not re.fullmatch(r'\+?\d{9,15}', phone):
            raise forms.ValidationError('Enter a valid phone number')
        return phone

    def clean_account_number(self):
        account_number = self.cleaned_data.get('account_number', '').replace(' ', '')
        if account_number and not account_number.isdigit():
            raise forms.ValidationError('Account number must contain digits only')
        return account_number

    def vendor_data(self):
        return {
            key: value for key, value in self.cleaned_data.items()
            if key not in self.DOCUMENT_FIELDS
        }

    def documents(self):
        return {key: self.cleaned_data.get(key) for key in self.DOCUMENT_FIELDS if self.cleaned_data.get(key)}


class VendorProfileForm(forms.Form):
    """Partial profile update; only submitted fields are changed"""

    business_name = forms.CharField(max_length=200, required=False)
    business_email = forms.EmailField(required=False)
    business_phone = forms.CharField(max_length=20, required=False)
    business_address = forms.CharField(required=False)
    business_description = forms.CharField(required=False)
    business_type = forms.CharField(max_length=50, required=False)
    tax_id = forms.CharField(max_length=50, required=False)
    logo = forms.URLField(max_length=500, required=False)
    banner = forms.URLField(max_length=500, required=False)
    account_name = forms.CharField(max_length=200, required=False)
    account_number = forms.CharField(max_length=30, required=False)
    bank_name = forms.CharField(max_length=100, required=False)
    branch_code = forms.CharField(max_length=20, required=False)

    def updates(self):
        """Cleaned values for the keys present in the submitted data"""
        return {key: value for key, value in self.cleaned_data.items() if key in self.data}


# ==========================================
# PAYOUTS
# ==========================================

class PayoutRequestForm(forms.Form):
    """Vendor payout request"""

    amount = forms.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    payout_method = forms.CharField(max_length=50, required=False)
    notes = forms.CharField(required=False)

    def clean_amount(self):
        amount = self.cleaned_data['amount']
        minimum = Decimal(getattr(settings, 'PAYOUT_MINIMUM_AMOUNT', 0))
        if amount < minimum:
            raise forms.ValidationError(f'Minimum payout is {minimum}')
        return amount


# ==========================================
# ADMIN
# ==========================================

class VendorStatusForm(forms.Form):
    status = forms.ChoiceField(choices=Vendor.STATUS_CHOICES)
    reason = forms.CharField(required=False)

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('status') in (Vendor.STATUS_SUSPENDED, Vendor.STATUS_REJECTED) \
                and not cleaned_data.get('reason'):
            raise forms.ValidationError({'reason': 'A reason is required when suspending or rejecting a vendor'})
        return cleaned_data


class ProductStatusForm(forms.Form):
    status = forms.ChoiceField(choices=Product.STATUS_CHOICES)
    reason = forms.CharField(required=False)

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('status') == Product.STATUS_REJECTED and not cleaned_data.get('reason'):
            raise forms.ValidationError({'reason': 'A reason is required when rejecting a product'})
        return cleaned_data
