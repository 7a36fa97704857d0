"""
Vendor App Serializers
Plain dict renderings of vendor records for the JSON views
"""


def serialize_vendor(vendor, include_wallet=False):
    data = {
        'id': vendor.pk,
        'business_name': vendor.business_name,
        'business_email': vendor.business_email,
        'business_phone': vendor.business_phone,
        'business_address': vendor.business_address,
        'business_description': vendor.business_description,
        'business_type': vendor.business_type,
        'logo': vendor.logo,
        'banner': vendor.banner,
        'status': vendor.status,
        'rating': vendor.rating,
        'review_count': vendor.review_count,
        'created_at': vendor.created_at,
    }

    if include_wallet:
        wallet = getattr(vendor, 'wallet', None)
        data.update({
            'tax_id': vendor.tax_id,
            'documents': vendor.documents,
            'status_reason': vendor.status_reason,
            'wallet': serialize_wallet(wallet) if wallet else None,
        })
    return data


def serialize_wallet(wallet):
    return {
        'commission_rate': wallet.commission_rate,
        'total_sales': wallet.total_sales,
        'total_earnings': wallet.total_earnings,
        'available_balance': wallet.available_balance,
        'pending_balance': wallet.pending_balance,
        'total_withdrawn': wallet.total_withdrawn,
        'bank_details': wallet.bank_details,
    }


def serialize_payout(payout):
    return {
        'id': payout.pk,
        'vendor_id': payout.vendor_id,
        'amount': payout.amount,
        'status': payout.status,
        'reference': payout.reference,
        'bank_details': payout.bank_details,
        'payout_method': payout.payout_method,
        'notes': payout.notes,
        'created_at': payout.created_at,
    }


def serialize_product(product):
    return {
        'id': product.pk,
        'vendor_id': product.vendor_id,
        'name': product.name,
        'price': product.price,
        'status': product.status,
        'rating': product.rating,
        'review_count': product.review_count,
    }
