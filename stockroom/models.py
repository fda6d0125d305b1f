from datetime import datetime

from stockroom.extensions import db


class StorageEntry(db.Model):
    __tablename__ = "storage_entry"

    key = db.Column(db.String(120), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )
