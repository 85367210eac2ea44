"""
Secure client IP detection for the TrackReview platform

Uses django-ipware so that proxy headers are honored only when they come from
IPWARE_TRUSTED_PROXY_LIST. The result feeds rate limiting and log context.

Usage:
    from apps.common.request_ip import get_safe_client_ip

    def my_view(request):
        client_ip = get_safe_client_ip(request)
"""

from __future__ import annotations

from django.conf import settings
from django.http import HttpRequest
from ipware import get_client_ip

DEFAULT_CLIENT_IP = "127.0.0.1"


def get_safe_client_ip(request: HttpRequest) -> str:
    """
    Get the real client IP address, respecting proxy trust configuration.

    Dev/Local: IPWARE_TRUSTED_PROXY_LIST = [] so only REMOTE_ADDR is used.
    Prod: only the load balancer CIDRs are trusted to set X-Forwarded-For.
    """
    trusted_proxies = getattr(settings, "IPWARE_TRUSTED_PROXY_LIST", [])
    remote_addr = request.META.get("REMOTE_ADDR") or DEFAULT_CLIENT_IP

    if not trusted_proxies:
        return remote_addr

    client_ip, _routable = get_client_ip(request, proxy_trusted_ips=trusted_proxies)
    return client_ip or remote_addr


def ratelimit_client_ip(group: str, request: HttpRequest) -> str:
    """django-ratelimit key callable using proxy-aware client IP"""
    return get_safe_client_ip(request)
