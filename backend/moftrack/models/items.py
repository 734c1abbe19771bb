from __future__ import annotations

from ..extensions import db
from moftrack.time_utils import to_utc_z

class Item(db.Model):
    """
    One physical serialized unit.

    INVARIANTS:
    - verified_by_requester implies picked_by_picker
    - picked_by_picker implies mof_id is set
    - mof_id, once set by a scan, never changes

    Items are created unassigned and are never deleted or unbound.
    """
    __tablename__ = "items"
    __table_args__ = (
        db.UniqueConstraint("serial_number", name="uq_items_serial_number"),
        db.Index("ix_items_mof_picked", "mof_id", "picked_by_picker"),
        db.Index("ix_items_mof_verified", "mof_id", "verified_by_requester"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    serial_number = db.Column(db.String(128), nullable=False)
    part_number = db.Column(db.String(64), nullable=False, index=True)
    supplier = db.Column(db.String(255), nullable=False)

    picked_by_picker = db.Column(db.Boolean, nullable=False, default=False)
    verified_by_requester = db.Column(db.Boolean, nullable=False, default=False)

    mof_id = db.Column(db.Integer, db.ForeignKey("mofs.id"), nullable=True, index=True)
    picked_at = db.Column(db.DateTime(timezone=True), nullable=True)
    verified_at = db.Column(db.DateTime(timezone=True), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    mof = db.relationship("Mof", backref=db.backref("items", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Item id={self.id} serial={self.serial_number!r} mof_id={self.mof_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "serial_number": self.serial_number,
            "part_number": self.part_number,
            "supplier": self.supplier,
            "picked_by_picker": self.picked_by_picker,
            "verified_by_requester": self.verified_by_requester,
            "mof_id": self.mof_id,
            "picked_at": to_utc_z(self.picked_at),
            "verified_at": to_utc_z(self.verified_at),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
