"""
FastAPI dependencies. Tests swap these out through app.dependency_overrides.
"""
from functools import lru_cache
from typing import Optional

from peerlink import config
from peerlink.llm.insight import LLMInsightClient, insight_client_from_config
from peerlink.store import DocumentStore, JsonDocumentStore


def get_store() -> DocumentStore:
    return JsonDocumentStore(config.PEERLINK_DATA_DIR)


@lru_cache()
def get_insight_client() -> Optional[LLMInsightClient]:
    """
    One insight client per process, so every request shares the SDK
    connection pool. Released by close_insight_client() on shutdown.
    """
    return insight_client_from_config()


async def close_insight_client() -> None:
    if get_insight_client.cache_info().currsize == 0:
        return
    client = get_insight_client()
    get_insight_client.cache_clear()
    if client is not None:
        await client.aclose()
