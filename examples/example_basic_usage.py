"""Basic usage of the MongoDB document store.

🚀 **How to Run:**
   ```bash
   DOCUMENT_STORE_MONGODB_CONNECTION_STRING="mongodb://localhost:27017/?replicaSet=rs0" \
       python examples/example_basic_usage.py
   ```

Walks through the request lifecycle: connect, set up indexes, run a few
writes inside a tracked transaction, commit, then page through results.
Transactions require MongoDB running as a replica set.
"""

import logging
import uuid
from datetime import UTC, datetime

from mongodb_document_store import (
    IndexDescriptor,
    IndexKey,
    NotFoundError,
    Settings,
    create_client_from_settings,
)

settings = Settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> None:
    with create_client_from_settings(settings) as client:
        client.ping()

        # Startup: TTL expiry plus one secondary index
        client.set_ttl()
        client.ensure_indices(
            [IndexDescriptor(keys=[IndexKey("status"), IndexKey("created_at", descending=True)])]
        )

        transaction_id = f"batch-{uuid.uuid4().hex[:8]}"
        client.start_transaction(transaction_id)
        for i in range(5):
            client.create(
                {"name": f"task-{i}", "status": "pending", "created_at": datetime.now(UTC)},
                transaction_id=transaction_id,
            )
        client.update_partial(
            {"name": "task-0"}, {"$set": {"status": "running"}}, transaction_id=transaction_id
        )
        client.commit_transaction(transaction_id, timeout=10)

        with client.list({"status": "pending"}, skip=1, limit=2) as cursor:
            for doc in cursor:
                logger.info(f"Pending task: {doc['name']}")

        counts = client.aggregate(
            [{"$group": {"_id": "$status", "count": {"$sum": 1}}}]
        ).to_list()
        logger.info(f"Tasks by status: {counts}")

        try:
            client.get({"name": "does-not-exist"})
        except NotFoundError as e:
            logger.info(f"Lookup miss reported as expected: {e}")


if __name__ == "__main__":
    main()
