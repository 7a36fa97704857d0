"""
Review App Forms
"""

from django import forms

from .models import Review


class ReviewStatusForm(forms.Form):
    status = forms.ChoiceField(choices=Review.STATUS_CHOICES)


class ReviewReplyForm(forms.Form):
    text = forms.CharField(max_length=2000)
