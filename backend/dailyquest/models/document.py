from datetime import datetime

from dailyquest.extensions import db


class Document(db.Model):
    """One JSON document in a named collection (users, challenges, items, ...)."""

    __tablename__ = "documents"
    __table_args__ = (
        db.UniqueConstraint("collection", "doc_id", name="uq_documents_collection_doc_id"),
    )

    # Insertion order; collections are always read back in this order.
    seq = db.Column(db.Integer, primary_key=True, autoincrement=True)

    collection = db.Column(db.String(64), nullable=False, index=True)
    doc_id = db.Column(db.String(64), nullable=False, index=True)

    body = db.Column(db.JSON, nullable=False, default=dict)
    version = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self) -> dict:
        out = dict(self.body or {})
        out["id"] = self.doc_id
        out["version"] = int(self.version or 1)
        return out
