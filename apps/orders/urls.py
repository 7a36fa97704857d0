from django.urls import path
from . import views

app_name = 'orders'

urlpatterns = [
    # Customer
    path('', views.orders, name='orders'),
    path('vendor/', views.vendor_orders, name='vendor_orders'),
    path('admin/', views.admin_orders, name='admin_orders'),
    path('<str:order_code>/', views.order_detail, name='order_detail'),
    path('<str:order_code>/cancel/', views.cancel, name='cancel'),
    path('<str:order_code>/returns/', views.returns, name='returns'),

    # Fulfilment
    path('<str:order_code>/status/', views.order_status, name='order_status'),
    path('<str:order_code>/tracking/', views.tracking, name='tracking'),

    # Payment
    path('<str:order_code>/payment/', views.payment_status, name='payment_status'),
]
