from __future__ import annotations

from ..extensions import db
from marketplace.time_utils import to_utc_z

ROLE_ADMIN = "admin"
ROLE_PRODUCER = "producer"
ROLE_SUPERMARKET = "supermarket"
VALID_ROLES = {ROLE_ADMIN, ROLE_PRODUCER, ROLE_SUPERMARKET}

CERTIFICATE_TYPES = ("globalGap", "grasp", "eco")


class User(db.Model):
    """
    Marketplace account: admin, producer or supermarket.

    Email, role and created_at do not change after creation.
    """
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    password = db.Column(db.String(255), nullable=False)  # bcrypt hash
    role = db.Column(db.String(32), nullable=False, default=ROLE_PRODUCER)
    name = db.Column(db.String(255), nullable=False)

    company_name = db.Column(db.String(255), nullable=True)
    vat_number = db.Column(db.String(64), nullable=True)
    street = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(128), nullable=True)
    state = db.Column(db.String(128), nullable=True)
    country = db.Column(db.String(128), nullable=True)
    postal_code = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    certifications = db.relationship(
        "Certification",
        backref="user",
        lazy=True,
        cascade="all, delete-orphan",
    )
    offers = db.relationship(
        "Offer",
        back_populates="producer",
        lazy=True,
        cascade="all, delete-orphan",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role,
            "name": self.name,
            "company_name": self.company_name,
            "vat_number": self.vat_number,
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "country": self.country,
            "postal_code": self.postal_code,
            "created_at": to_utc_z(self.created_at),
            "certifications": {c.type: c.to_dict() for c in self.certifications},
        }


class Certification(db.Model):
    """Producer quality certificate (globalGap, grasp, eco)."""
    __tablename__ = "certifications"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    type = db.Column(db.String(32), nullable=False)
    number = db.Column(db.String(128), nullable=False)
    valid_until = db.Column(db.Date, nullable=False)
    status = db.Column(db.String(32), nullable=False, default="active")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "number": self.number,
            "validUntil": self.valid_until.isoformat() if self.valid_until else None,
            "status": self.status,
        }
