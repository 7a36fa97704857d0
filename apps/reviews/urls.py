from django.urls import path
from . import views

app_name = 'reviews'

urlpatterns = [
    path('', views.my_reviews, name='my_reviews'),
    path('product/<int:product_id>/', views.product_reviews, name='product_reviews'),
    path('store/<int:vendor_id>/', views.store_reviews, name='store_reviews'),
    path('<int:review_id>/helpful/', views.helpful, name='helpful'),
    path('mine/<int:review_id>/', views.my_review, name='my_review'),

    # Vendor
    path('vendor/', views.vendor_reviews, name='vendor_reviews'),
    path('<int:review_id>/reply/', views.reply, name='reply'),
    path('<int:review_id>/status/', views.vendor_review_status, name='vendor_review_status'),

    # Admin
    path('admin/', views.admin_reviews, name='admin_reviews'),
    path('admin/<int:review_id>/', views.admin_review, name='admin_review'),
]
