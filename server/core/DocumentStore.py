from shared.helper.HelperConfig import HelperConfig
from shared.models.document import Document


class DocumentStore:
    """Latest document snapshot per owner, as pushed by the document feed.

    Snapshots are replaced wholesale; deleted documents simply disappear with
    the next push.
    """

    def __init__(self, helper_config: HelperConfig) -> None:
        self.logging = helper_config.get_logger()
        self._snapshots: dict[int, list[Document]] = {}

    def replace(self, owner_id: int, documents: list[Document]) -> list[Document]:
        """Store a new snapshot for an owner, most recently uploaded first.

        Args:
            owner_id (int): The owner the collection belongs to.
            documents (list[Document]): The full current collection.

        Returns:
            list[Document]: The stored, ordered snapshot.
        """
        # last occurrence of a duplicated id wins
        unique = {doc.id: doc for doc in documents}
        if len(unique) != len(documents):
            self.logging.warning(
                "Feed for owner_id=%d contained %d duplicated document id(s).",
                owner_id,
                len(documents) - len(unique),
            )
        ordered = sorted(
            unique.values(),
            key=lambda doc: (doc.uploaded_at is None, -doc.uploaded_at.timestamp() if doc.uploaded_at else 0.0),
        )
        self._snapshots[owner_id] = ordered
        self.logging.info("Document snapshot replaced — owner_id=%d documents=%d", owner_id, len(ordered))
        return list(ordered)

    def get_documents(self, owner_id: int) -> list[Document]:
        """Current snapshot of an owner, empty if the feed never pushed one."""
        return list(self._snapshots.get(owner_id, []))
