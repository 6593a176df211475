"""Vector store service for per-video namespaces in Pinecone."""

from typing import Any

from pinecone import Pinecone

from src.utils.logging import get_logger

from .config import StudyAssistantConfig
from .errors import VectorStoreError
from .schemas import NamespaceStats, NamespaceStatus, VectorMatch, VectorRecord

logger = get_logger(__name__)

UPSERT_BATCH_SIZE = 100


class VectorStoreService:
    """Service for storing and searching transcript vectors in Pinecone.

    Every video gets its own namespace (the video ID), so similarity search
    never crosses videos. Records are upserted by deterministic ID and are
    never deleted by this service.
    """

    def __init__(self, config: StudyAssistantConfig):
        """Initialize vector store service with configuration.

        Args:
            config: Configuration object with Pinecone credentials and index name.
        """
        self.config = config
        self.client = Pinecone(api_key=config.pinecone_api_key)
        self.index = self.client.Index(config.pinecone_index)
        logger.info("vector_store_initialized", index=config.pinecone_index)

    async def upsert(self, namespace: str, records: list[VectorRecord]) -> None:
        """Upsert records into a namespace.

        Args:
            namespace: Namespace (video ID) to write to.
            records: Records to upsert. An empty list is a no-op.

        Raises:
            VectorStoreError: If the upsert request fails.
        """
        if not records:
            return

        try:
            for i in range(0, len(records), UPSERT_BATCH_SIZE):
                batch = records[i : i + UPSERT_BATCH_SIZE]
                self.index.upsert(
                    vectors=[record.model_dump() for record in batch],
                    namespace=namespace,
                )
            logger.info("vectors_upserted", namespace=namespace, count=len(records))

        except Exception as e:
            logger.exception(
                "vector_upsert_failed",
                namespace=namespace,
                count=len(records),
                error_type=type(e).__name__,
            )
            raise VectorStoreError(f"Upsert failed: {e}") from e

    async def query(
        self,
        namespace: str,
        vector: list[float],
        top_k: int = 5,
        filter: dict[str, Any] | None = None,
    ) -> list[VectorMatch]:
        """Search a namespace for the vectors most similar to ``vector``.

        Args:
            namespace: Namespace (video ID) to search.
            vector: Query embedding.
            top_k: Number of matches to return.
            filter: Optional metadata filter, e.g. {"type": {"$eq": "text_chunk"}}.

        Returns:
            Matches ordered by descending similarity, with metadata.

        Raises:
            VectorStoreError: If the query fails.
        """
        try:
            kwargs: dict[str, Any] = {
                "namespace": namespace,
                "vector": vector,
                "top_k": top_k,
                "include_metadata": True,
            }
            if filter:
                kwargs["filter"] = filter

            response = self.index.query(**kwargs)
            matches = [
                VectorMatch(
                    id=match.id,
                    score=float(match.score or 0.0),
                    metadata=dict(match.metadata or {}),
                )
                for match in response.matches
            ]
            logger.info(
                "vector_search_completed",
                namespace=namespace,
                results=len(matches),
                top_k=top_k,
            )
            return matches

        except Exception as e:
            logger.exception(
                "vector_search_failed",
                namespace=namespace,
                error_type=type(e).__name__,
            )
            raise VectorStoreError(f"Query failed: {e}") from e

    async def describe_stats(self, namespace: str) -> NamespaceStats:
        """Get vector statistics for a namespace.

        Args:
            namespace: Namespace (video ID) to describe.

        Returns:
            NamespaceStats with a vector count of 0 when the namespace is absent.

        Raises:
            VectorStoreError: If the stats request fails.
        """
        try:
            stats = self.index.describe_index_stats()
        except Exception as e:
            logger.exception(
                "describe_stats_failed",
                namespace=namespace,
                error_type=type(e).__name__,
            )
            raise VectorStoreError(f"Describe stats failed: {e}") from e

        summary = (stats.namespaces or {}).get(namespace)
        vector_count = int(getattr(summary, "vector_count", 0) or 0) if summary else 0
        return NamespaceStats(namespace=namespace, vector_count=vector_count)

    async def check_namespace(self, namespace: str) -> NamespaceStatus:
        """Check whether a namespace already holds vectors.

        Args:
            namespace: Namespace (video ID) to check.

        Returns:
            EXISTS if it holds vectors, NOT_FOUND if it is absent or empty,
            CHECK_FAILED if the stats request itself failed.
        """
        try:
            stats = await self.describe_stats(namespace)
        except VectorStoreError:
            logger.warning("namespace_check_failed", namespace=namespace)
            return NamespaceStatus.CHECK_FAILED

        status = NamespaceStatus.EXISTS if stats.vector_count > 0 else NamespaceStatus.NOT_FOUND
        logger.debug(
            "namespace_checked",
            namespace=namespace,
            status=status.value,
            vector_count=stats.vector_count,
        )
        return status
