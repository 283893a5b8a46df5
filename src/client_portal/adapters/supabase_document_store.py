"""Supabase-backed document store."""

from dataclasses import dataclass

from supabase import Client

from client_portal.services.store import DocumentSnapshot, DocumentStore, DocumentWrite

DOCUMENTS_TABLE = "portal_documents"
COMMIT_FUNCTION = "commit_portal_documents"


@dataclass
class SupabaseDocumentStore(DocumentStore):
    """Stores portal documents as jsonb rows keyed by path.

    Multi-document commits go through a Postgres function that checks every
    expected revision under row locks and applies all writes or none.
    """

    client: Client

    def get(self, path: str) -> DocumentSnapshot:
        """Return the stored document at ``path``."""
        response = (
            self.client.table(DOCUMENTS_TABLE)
            .select("path, data, revision")
            .eq("path", path)
            .limit(1)
            .execute()
        )
        if not response.data:
            return DocumentSnapshot(path=path, data=None, revision=0)
        row = response.data[0]
        return DocumentSnapshot(
            path=path,
            data=row.get("data") or {},
            revision=int(row.get("revision") or 0),
        )

    def commit(
        self, writes: list[DocumentWrite], preconditions: dict[str, int]
    ) -> bool:
        """Apply writes atomically; False means another writer got there first."""
        payload = {
            "writes": [{"path": write.path, "data": write.data} for write in writes],
            "preconditions": preconditions,
        }
        response = self.client.rpc(COMMIT_FUNCTION, payload).execute()
        return bool(response.data)
