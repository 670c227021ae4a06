"""
Service identification prefixed to every log line.

Format: ``<service>@<env>:<instance>``. The instance part is the pod hostname
when running under Kubernetes, otherwise the process id.
"""

from functools import lru_cache
import os


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'seat-booking')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    pod_name = os.getenv('POD_NAME') or (
        os.getenv('HOSTNAME', '') if os.getenv('KUBERNETES_SERVICE_HOST') else ''
    )
    # Pod names end with a replica hash; keep only that suffix
    instance = pod_name.rsplit('-', 1)[-1][:8] if pod_name else str(os.getpid())

    return f'{service_name}@{deploy_env}:{instance}'
