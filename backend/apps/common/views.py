import os
import time
import uuid

import redis as redis_lib
from django.core.cache import cache
from django.http import JsonResponse

from .logger import get_logger

logger = get_logger(__name__).bind(component='common', layer='health')


def _redis_ping(url: str, timeout: float = 0.3):
    try:
        client = redis_lib.from_url(url, socket_connect_timeout=timeout, socket_timeout=timeout)
        pong = client.ping()
    except redis_lib.RedisError as e:
        logger.warning('Redis health check failed', error=str(e))
        return {'status': 'fail', 'error': str(e)}
    if not pong:
        logger.warning('Redis health check returned unexpected response')
        return {'status': 'fail'}
    logger.debug('Redis health check succeeded')
    return {'status': 'ok'}


def _cache_check():
    """Round-trip a throwaway key; cart snapshots and sessions live in the cache."""
    started = time.time()
    key = f'health:{uuid.uuid4().hex}'
    try:
        cache.set(key, 'ok', timeout=5)
        value = cache.get(key)
        cache.delete(key)
    except Exception as e:  # backend-specific errors vary (redis, memcached, locmem)
        logger.error('Cache health check failed unexpectedly', error=str(e), exception=e.__class__.__name__)
        return {'status': 'fail', 'error': str(e), 'exception': e.__class__.__name__}
    if value != 'ok':
        # django-redis swallows connection errors when IGNORE_EXCEPTIONS is set
        logger.warning('Cache health check could not read back value')
        return {'status': 'fail', 'error': 'value not readable'}
    latency = round((time.time() - started) * 1000, 2)
    logger.debug('Cache health check succeeded', latency_ms=latency)
    return {'status': 'ok', 'latency_ms': latency}


def _catalog_check():
    from apps.catalog.container import build_catalog_client

    client = build_catalog_client()
    try:
        reachable = client.ping()
    finally:
        client.close()
    return {'status': 'ok' if reachable else 'fail'}


def live_health(request):
    """Liveness probe: process is up and can service requests."""
    logger.debug('Liveness probe served')
    return JsonResponse({'status': 'alive'})


def ready_health(request):
    """Readiness probe: verifies the cache, Redis and the catalog API."""
    checks = {'cache': _cache_check()}

    redis_url = os.getenv('REDIS_URL')
    if redis_url:
        checks['redis'] = _redis_ping(redis_url)
    else:
        checks['redis'] = {'status': 'skipped', 'detail': 'REDIS_URL not set'}

    checks['catalog'] = _catalog_check()

    failing = [name for name, r in checks.items() if r.get('status') == 'fail']
    overall_status = 'ok' if not failing else 'degraded'
    http_status = 200 if not failing else 503
    logger.info('Readiness probe evaluated', status=overall_status, failing_components=failing)
    return JsonResponse({'status': overall_status, 'checks': checks}, status=http_status)
