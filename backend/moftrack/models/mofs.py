from __future__ import annotations

from ..extensions import db
from moftrack.time_utils import to_utc_z

class Mof(db.Model):
    """
    Material Outgoing Form: one outstanding request for a quantity of a part.

    LIFECYCLE:
        Pending -> In Progress -> MOF siap Supply -> Completed

    Status is stored, not derived. The scan and verification services
    recompute it in the same transaction as the item change that triggers
    it (see services/status_resolver.py). serial_number and
    quantity_requested never change after creation.

    version_id is an optimistic-locking counter: two sessions that both
    loaded the same row cannot both write it.
    """
    __tablename__ = "mofs"
    __table_args__ = (
        db.UniqueConstraint("serial_number", name="uq_mofs_serial_number"),
        db.CheckConstraint("quantity_requested > 0", name="ck_mofs_quantity_positive"),
        db.Index("ix_mofs_created_by_created_at", "created_by", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    serial_number = db.Column(db.String(64), nullable=False)
    part_number = db.Column(db.String(64), nullable=False, index=True)
    quantity_requested = db.Column(db.Integer, nullable=False)
    expected_receiving_date = db.Column(db.DateTime(timezone=True), nullable=False)

    requester_name = db.Column(db.String(255), nullable=False)
    department = db.Column(db.String(255), nullable=False)
    project = db.Column(db.String(255), nullable=False)

    # Must match status_resolver.MOF_STATUSES
    status = db.Column(db.String(32), nullable=False, default="Pending", index=True)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    creator = db.relationship("User", backref=db.backref("created_mofs", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Mof id={self.id} serial={self.serial_number!r} status={self.status!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "serial_number": self.serial_number,
            "part_number": self.part_number,
            "quantity_requested": self.quantity_requested,
            "expected_receiving_date": to_utc_z(self.expected_receiving_date),
            "requester_name": self.requester_name,
            "department": self.department,
            "project": self.project,
            "status": self.status,
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
