"""Prometheus counters for cache and dispatch activity."""
import prometheus_client as prom

CACHE_HITS = prom.Counter('cm_cache_hits_total', 'Calls served from the cache', ['method'])
CACHE_MISSES = prom.Counter('cm_cache_misses_total', 'Cache lookups without a live entry', ['method'])
CACHE_WRITE_FAILURES = prom.Counter('cm_cache_write_failures_total', 'Cache entries that could not be persisted', ['method'])
DISPATCHED_CALLS = prom.Counter('cm_dispatched_calls_total', 'Calls routed to a capability client', ['capability', 'operation'])
