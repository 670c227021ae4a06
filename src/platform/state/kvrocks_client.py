import asyncio
from typing import List, Optional, Union

from redis.asyncio import ConnectionPool as AsyncConnectionPool, Redis as AsyncRedis
from redis.asyncio.cluster import ClusterNode, RedisCluster
from redis.exceptions import ConnectionError as RedisConnectionError, RedisClusterException

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


# Standalone and cluster clients expose the same command surface
KvrocksClientType = Union[AsyncRedis, RedisCluster]

_STARTUP_MAX_RETRIES = 30
_STARTUP_RETRY_DELAY = 2.0


def _parse_cluster_nodes(nodes_str: str) -> List[ClusterNode]:
    """
    Parse "host1:port1,host2:port2" into startup nodes.

    Raises:
        ValueError: a node entry is not ``host:port``
    """
    nodes: List[ClusterNode] = []
    for node in nodes_str.split(','):
        node = node.strip()
        if not node:
            continue
        host, sep, port_str = node.rpartition(':')
        if not sep or not host:
            raise ValueError(f'Invalid cluster node "{node}", expected host:port')
        nodes.append(ClusterNode(host=host, port=int(port_str)))
    return nodes


def _pool_kwargs() -> dict:
    return {
        'password': settings.KVROCKS_PASSWORD or None,
        'decode_responses': settings.REDIS_DECODE_RESPONSES,
        'max_connections': settings.KVROCKS_POOL_MAX_CONNECTIONS,
        'socket_timeout': settings.KVROCKS_POOL_SOCKET_TIMEOUT,
        'socket_connect_timeout': settings.KVROCKS_POOL_SOCKET_CONNECT_TIMEOUT,
        'socket_keepalive': settings.KVROCKS_POOL_SOCKET_KEEPALIVE,
        'health_check_interval': settings.KVROCKS_POOL_HEALTH_CHECK_INTERVAL,
    }


class KvrocksClient:
    """
    Process-wide Kvrocks connection holder for the seat ledger and booking store.

    Usage:
        await kvrocks_client.initialize()  # lifespan startup
        client = kvrocks_client.get_client()  # adapters
    """

    def __init__(self) -> None:
        self._client: Optional[KvrocksClientType] = None
        self._is_cluster: bool = False

    async def initialize(self) -> KvrocksClientType:
        """Connect and ping (idempotent)."""
        if self._client is not None:
            return self._client

        self._is_cluster = settings.KVROCKS_CLUSTER_MODE
        for attempt in range(1, _STARTUP_MAX_RETRIES + 1):
            try:
                client = (
                    await self._connect_cluster()
                    if self._is_cluster
                    else await self._connect_standalone()
                )
                break
            except (RedisClusterException, RedisConnectionError) as e:
                if attempt == _STARTUP_MAX_RETRIES:
                    raise
                Logger.base.warning(
                    f'⏳ [KVROCKS] Not ready, attempt {attempt}/{_STARTUP_MAX_RETRIES} | {e}'
                )
                await asyncio.sleep(_STARTUP_RETRY_DELAY)

        self._client = client
        mode = 'cluster' if self._is_cluster else 'standalone'
        Logger.base.info(f'✅ [KVROCKS] Connected ({mode})')
        return client

    async def _connect_standalone(self) -> AsyncRedis:
        pool = AsyncConnectionPool.from_url(
            f'redis://{settings.KVROCKS_HOST}:{settings.KVROCKS_PORT}/{settings.KVROCKS_DB}',
            **_pool_kwargs(),
        )
        client = AsyncRedis.from_pool(pool)
        await client.ping()
        return client

    async def _connect_cluster(self) -> RedisCluster:
        if not settings.KVROCKS_CLUSTER_NODES:
            raise ValueError(
                'KVROCKS_CLUSTER_NODES must be set when KVROCKS_CLUSTER_MODE is True. '
                'Format: "host1:port1,host2:port2"'
            )
        client = RedisCluster(
            startup_nodes=_parse_cluster_nodes(settings.KVROCKS_CLUSTER_NODES),
            require_full_coverage=True,
            read_from_replicas=False,  # Hold state must be read-your-writes
            **_pool_kwargs(),
        )
        await client.ping()
        return client

    def get_client(self) -> KvrocksClientType:
        if self._client is None:
            raise RuntimeError(
                'Kvrocks client not initialized. '
                'Call await kvrocks_client.initialize() during startup.'
            )
        return self._client

    @property
    def is_initialized(self) -> bool:
        return self._client is not None

    @property
    def is_cluster_mode(self) -> bool:
        return self._is_cluster

    async def disconnect(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            self._is_cluster = False


kvrocks_client = KvrocksClient()
