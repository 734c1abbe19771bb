from __future__ import annotations

from ..extensions import db
from moftrack.time_utils import to_utc_z

class PickRecord(db.Model):
    """
    Append-only audit event: one row per successful scan.

    Never updated or deleted.
    """
    __tablename__ = "pick_records"
    __table_args__ = (
        db.Index("ix_pick_records_mof_item", "mof_id", "item_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    mof_id = db.Column(db.Integer, db.ForeignKey("mofs.id"), nullable=False, index=True)
    item_id = db.Column(db.Integer, db.ForeignKey("items.id"), nullable=False, index=True)
    picked_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    picked_at = db.Column(db.DateTime(timezone=True), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    picker = db.relationship("User", foreign_keys=[picked_by])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "mof_id": self.mof_id,
            "item_id": self.item_id,
            "picked_by": self.picked_by,
            "picked_at": to_utc_z(self.picked_at),
            "created_at": to_utc_z(self.created_at),
        }


class VerificationRecord(db.Model):
    """
    Append-only audit event: one row per successful requester verification.
    """
    __tablename__ = "verification_records"
    __table_args__ = (
        db.Index("ix_verification_records_mof_item", "mof_id", "item_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    mof_id = db.Column(db.Integer, db.ForeignKey("mofs.id"), nullable=False, index=True)
    item_id = db.Column(db.Integer, db.ForeignKey("items.id"), nullable=False, index=True)
    verified_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    verified_at = db.Column(db.DateTime(timezone=True), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    verifier = db.relationship("User", foreign_keys=[verified_by])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "mof_id": self.mof_id,
            "item_id": self.item_id,
            "verified_by": self.verified_by,
            "verified_at": to_utc_z(self.verified_at),
            "created_at": to_utc_z(self.created_at),
        }
