"""
URL configuration for the clipper marketplace backend.

Routes include administration, API modules, scheduler hooks, health checks and metrics.
"""
import os

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.http import HttpResponse
from django.urls import URLPattern, URLResolver, get_resolver, include, path
from prometheus_client import REGISTRY, CollectorRegistry, generate_latest, multiprocess

from tracking.urls import cron_urlpatterns

# Use the multiprocess collector only when PROMETHEUS_MULTIPROC_DIR is set (gunicorn workers)
if os.environ.get('PROMETHEUS_MULTIPROC_DIR'):
    registry = CollectorRegistry()
    multiprocess.MultiProcessCollector(registry)
else:
    registry = REGISTRY


def health_check(request):
    return HttpResponse("OK", content_type="text/plain")


def metrics(request):
    payload = generate_latest(registry)
    return HttpResponse(payload, content_type="text/plain; version=0.0.4")


def debug_urls(request):
    """
    Return a readable list of all URL patterns, including nested includes.
    """
    def extract_patterns(patterns, prefix=''):
        urls = []
        for pattern in patterns:
            if isinstance(pattern, URLPattern):
                urls.append(f"{prefix}{pattern.pattern}  (name={pattern.name})")
            elif isinstance(pattern, URLResolver):
                urls.extend(extract_patterns(pattern.url_patterns, prefix + str(pattern.pattern)))
        return urls

    return HttpResponse(f"<pre>{chr(10).join(extract_patterns(get_resolver().url_patterns))}</pre>")


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/account/', include('accounts.urls')),
    path('api/campaigns/', include('campaigns.urls')),
    path('api/submissions/', include('submissions.urls')),
    path('api/tracking/', include('tracking.urls')),
    path('api/cron/', include((cron_urlpatterns, 'cron'))),
    path('api/payouts/', include('payouts.urls')),
    path('api/support/', include('support.urls')),
    path('api/notifications/', include('notifications.urls')),
    path('api/audit/', include('audit.urls')),
    path('health/', health_check, name='health_check'),
    path('metrics/', metrics, name='metrics'),
]

if settings.DEBUG:
    urlpatterns += [path('django/debug-urls/', debug_urls, name='debug_urls')]
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
