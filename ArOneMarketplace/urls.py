"""
Main URL configuration for the AR ONE marketplace.
"""
from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

urlpatterns = [
    path('admin/', admin.site.urls),
    path('accounts/', include('allauth.urls')),

    # ==========================================
    # MARKETPLACE API
    # ==========================================
    path('vendors/', include(('apps.vendors.urls', 'vendors'), namespace='vendors')),
    path('orders/', include(('apps.orders.urls', 'orders'), namespace='orders')),
    path('reviews/', include(('apps.reviews.urls', 'reviews'), namespace='reviews')),
    path('notifications/', include(('apps.notifications.urls', 'notifications'), namespace='notifications')),
]

if settings.DEBUG:
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
