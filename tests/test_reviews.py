from decimal import Decimal
from io import StringIO
from unittest import mock

import pytest
from django.core.management import call_command

from apps.reviews.models import Review
from apps.reviews.services import (
    decide,
    delete_review,
    list_all_reviews,
    list_product_reviews,
    list_store_reviews,
    mark_review_helpful,
    reply_to_review,
    submit_review,
    update_review_status,
)
from apps.reviews.services import moderation
from apps.vendors.models import Product, Vendor
from core.exceptions import NotFoundError, ValidationError

pytestmark = pytest.mark.django_db


@pytest.fixture
def approved_review(customer, product):
    return Review.objects.create(
        product=product, vendor=product.vendor, customer=customer, rating=5, status=Review.STATUS_APPROVED
    )


def review_data(customer, product, **extra):
    data = {'customer_id': customer.pk, 'product_id': product.pk, 'rating': 4, 'title': 'Lovely', 'comment': 'Great finish'}
    data.update(extra)
    return data


class TestDecision:
    def test_first_review_is_held(self, customer):
        assert decide(customer.pk, 5) == (Review.STATUS_PENDING, 'First time reviewer')

    def test_low_rating_is_held(self, customer, approved_review):
        assert decide(customer.pk, 2) == (Review.STATUS_PENDING, 'Low rating')

    def test_denylisted_term_is_held(self, customer, approved_review):
        assert decide(customer.pk, 4, 'Total SCAM', '') == (Review.STATUS_PENDING, 'Flagged content')

    def test_clean_review_from_known_customer_is_approved(self, customer, approved_review):
        assert decide(customer.pk, 3, 'Nice', 'Well packed') == (Review.STATUS_APPROVED, '')

    def test_first_match_wins(self, customer):
        # first-time and low rating and flagged: reported as first-time
        assert decide(customer.pk, 1, 'fake') == (Review.STATUS_PENDING, 'First time reviewer')


class TestSubmit:
    def test_first_review_pending_and_not_counted(self, customer, product, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            review = submit_review(review_data(customer, product))

        assert review.status == Review.STATUS_PENDING
        assert review.vendor == product.vendor
        assert review.product_name == 'Brass Lamp'
        assert review.customer_name == 'Nimal Perera'
        product.refresh_from_db()
        assert product.review_count == 0

    def test_approved_review_updates_ratings(self, customer, product, approved_review,
                                             django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            review = submit_review(review_data(customer, product, rating=4))

        assert review.status == Review.STATUS_APPROVED
        product.refresh_from_db()
        assert product.review_count == 2
        assert product.rating == Decimal('4.5')
        vendor = Vendor.objects.get(pk=product.vendor_id)
        assert vendor.review_count == 2

    def test_store_review(self, customer, vendor):
        review = submit_review({'customer_id': customer.pk, 'vendor_id': vendor.pk, 'rating': 5})
        assert review.is_store_review
        assert review.vendor_name == 'Lanka Crafts'

    def test_product_vendor_mismatch(self, customer, product, other_vendor):
        with pytest.raises(ValidationError):
            submit_review(review_data(customer, product, vendor_id=other_vendor.pk))

    @pytest.mark.parametrize('rating', [0, 6, 'five', None, True])
    def test_bad_rating(self, customer, product, rating):
        with pytest.raises(ValidationError):
            submit_review(review_data(customer, product, rating=rating))

    def test_needs_subject(self, customer):
        with pytest.raises(ValidationError):
            submit_review({'customer_id': customer.pk, 'rating': 5})

    def test_needs_customer(self, product):
        with pytest.raises(ValidationError):
            submit_review({'product_id': product.pk, 'rating': 5})

    def test_unknown_product(self, customer):
        with pytest.raises(NotFoundError):
            submit_review({'customer_id': customer.pk, 'product_id': 99999, 'rating': 5})

    def test_moderation_failure_keeps_review_pending(self, customer, product):
        with mock.patch.object(moderation, 'decide', side_effect=RuntimeError('down')):
            review = submit_review(review_data(customer, product))

        assert review.status == Review.STATUS_PENDING
        assert review.moderation_reason == 'Moderation unavailable'

    def test_rating_recompute_failure_does_not_fail_submission(self, customer, product, approved_review,
                                                               django_capture_on_commit_callbacks):
        with mock.patch.object(moderation, 'recompute_product_rating', side_effect=RuntimeError('boom')):
            with django_capture_on_commit_callbacks(execute=True):
                review = submit_review(review_data(customer, product))

        assert Review.objects.filter(pk=review.pk).exists()

    def test_vendor_is_notified(self, customer, product, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            submit_review(review_data(customer, product))

        notification = product.vendor.user.notifications.get()
        assert notification.notification_type == 'product'
        assert 'Brass Lamp' in notification.message


class TestListings:
    def test_visibility(self, customer, make_user, product, approved_review):
        pending = Review.objects.create(product=product, vendor=product.vendor, customer=customer, rating=2)
        stranger = make_user()

        assert list_product_reviews(product.pk) == [approved_review]
        assert set(list_product_reviews(product.pk, viewer_id=customer.pk)) == {approved_review, pending}
        assert list_product_reviews(product.pk, viewer_id=stranger.pk) == [approved_review]

    def test_store_reviews_exclude_product_reviews(self, customer, vendor, approved_review):
        store_review = Review.objects.create(
            vendor=vendor, customer=customer, rating=4, status=Review.STATUS_APPROVED
        )
        assert list_store_reviews(vendor.pk) == [store_review]

    def test_admin_filter(self, approved_review):
        assert list_all_reviews(Review.STATUS_APPROVED) == [approved_review]
        assert list_all_reviews(Review.STATUS_REJECTED) == []
        with pytest.raises(ValidationError):
            list_all_reviews('spam')


class TestActions:
    def test_approve_recomputes(self, customer, product, django_capture_on_commit_callbacks):
        review = Review.objects.create(product=product, vendor=product.vendor, customer=customer, rating=3)
        with django_capture_on_commit_callbacks(execute=True):
            update_review_status(review.pk, Review.STATUS_APPROVED)

        product.refresh_from_db()
        assert (product.rating, product.review_count) == (Decimal('3.0'), 1)

    def test_reply_publishes(self, customer, product):
        review = Review.objects.create(product=product, vendor=product.vendor, customer=customer, rating=1)
        replied = reply_to_review(review.pk, 'Sorry, replacing it')

        assert replied.status == Review.STATUS_APPROVED
        assert replied.vendor_reply['text'] == 'Sorry, replacing it'

    def test_reply_needs_text(self, approved_review):
        with pytest.raises(ValidationError):
            reply_to_review(approved_review.pk, '')

    def test_helpful_counter(self, approved_review):
        assert mark_review_helpful(approved_review.pk) == 1
        assert mark_review_helpful(approved_review.pk) == 2

    def test_helpful_unknown(self):
        with pytest.raises(NotFoundError):
            mark_review_helpful(99999)

    def test_delete_recomputes(self, product, approved_review, django_capture_on_commit_callbacks):
        Product.objects.filter(pk=product.pk).update(rating=5, review_count=1)
        with django_capture_on_commit_callbacks(execute=True):
            delete_review(approved_review.pk)

        product.refresh_from_db()
        assert (product.rating, product.review_count) == (Decimal('0.0'), 0)

    def test_delete_one_of_several_recomputes_mean(self, make_user, product, django_capture_on_commit_callbacks):
        reviews = [
            Review.objects.create(product=product, vendor=product.vendor, customer=make_user(),
                                  rating=rating, status=Review.STATUS_APPROVED)
            for rating in (5, 5, 3)
        ]
        with django_capture_on_commit_callbacks(execute=True):
            delete_review(reviews[2].pk)

        product.refresh_from_db()
        assert (product.rating, product.review_count) == (Decimal('5.0'), 2)

    def test_reconcile_command(self, product, approved_review):
        Product.objects.filter(pk=product.pk).update(rating=1, review_count=9)

        call_command('reconcile_ratings', stdout=StringIO())

        product.refresh_from_db()
        assert (product.rating, product.review_count) == (Decimal('5.0'), 1)
