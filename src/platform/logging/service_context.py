"""
Service context for log lines.

Identifies which process wrote a line when several workers share one log sink.
"""

import os
from functools import lru_cache


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'concert-ticketing')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')
    # Container hostnames are unique per replica; fall back to PID locally
    instance = os.getenv('HOSTNAME', '')[:12] or str(os.getpid())
    return f'{service_name}@{deploy_env}:{instance}'
