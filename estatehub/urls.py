"""
URL configuration for the estatehub project.

Every app exposes a DRF router under /api/<app>/; the admin back-office lives
under /api/admin-panel/ and Django's own admin under /admin/.
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

from common import views as common_views

urlpatterns = [
    path('api/accounts/', include(('accounts.urls', 'accounts'), namespace='accounts')),
    path('api/notifications/', include(('notifications.urls', 'notifications'), namespace='notifications')),
    path('api/chat/', include(('chat.urls', 'chat'), namespace='chat')),
    path('api/properties/', include(('properties.urls', 'properties'), namespace='properties')),
    path('api/contracting/', include(('contracting.urls', 'contracting'), namespace='contracting')),
    path('api/marketplace/', include(('marketplace.urls', 'marketplace'), namespace='marketplace')),
    path('api/payments/', include(('payments.urls', 'payments'), namespace='payments')),
    path('api/reviews/', include(('reviews.urls', 'reviews'), namespace='reviews')),
    path('api/support/', include(('support.urls', 'support'), namespace='support')),
    path('api/admin-panel/', include(('adminpanel.urls', 'adminpanel'), namespace='adminpanel')),
    path('api-auth/', include('rest_framework.urls')),
    path('admin/', admin.site.urls),
    path('health/', common_views.health, name='health'),
]

handler404 = 'common.views.not_found'
handler500 = 'common.views.server_error'

# Serve media files from MEDIA_ROOT at MEDIA_URL in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
