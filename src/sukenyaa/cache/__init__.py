"""TTL caches: in-process, Redis and the fallback composition."""
