from django.urls import path
from . import views

app_name = 'vendors'

urlpatterns = [
    # Registration & profile
    path('register/', views.register, name='register'),
    path('profile/', views.profile, name='profile'),
    path('<int:vendor_id>/', views.vendor_detail, name='vendor_detail'),

    # Dashboard
    path('stats/', views.stats, name='stats'),
    path('customers/', views.customers, name='customers'),

    # Wallet
    path('payouts/', views.payouts, name='payouts'),

    # ==========================================
    # ADMIN
    # ==========================================
    path('admin/vendors/', views.admin_vendor_list, name='admin_vendor_list'),
    path('admin/vendors/<int:vendor_id>/stats/', views.admin_vendor_stats, name='admin_vendor_stats'),
    path('admin/vendors/<int:vendor_id>/status/', views.admin_vendor_status, name='admin_vendor_status'),
    path('admin/products/<int:product_id>/status/', views.admin_product_status, name='admin_product_status'),
]
