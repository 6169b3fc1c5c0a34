"""
User accounts and profiles.

Relational accounts hold the bcrypt password hash and certificate rows.
Document profiles (collection "users") are what the live app reads and
edits; email, role and createdAt are never changed through a profile update.
"""

from __future__ import annotations

import bcrypt
from flask import current_app

from ..activity import activity
from ..extensions import db
from ..models import User, Certification
from ..models.users import CERTIFICATE_TYPES, ROLE_PRODUCER, VALID_ROLES
from ..notifications import show_error, show_success
from ..validation import EMAIL_RE, ConflictError, ValidationError
from .document_store import COLLECTION_USERS, get_document_store
from marketplace.time_utils import parse_iso_date, utcnow_iso

IMMUTABLE_PROFILE_FIELDS = ("email", "role", "createdAt")

SCOPE = "users"


class UserNotFoundError(LookupError):
    """Raised when an operation needs an existing user profile."""


def hash_password(password: str) -> str:
    if not password or len(password) < 6:
        raise ValidationError("Password must be at least 6 characters")
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


# ----------------------------------------------------------------------
# Relational accounts
# ----------------------------------------------------------------------

def get_user_by_email(email: str) -> User | None:
    return db.session.query(User).filter_by(email=(email or "").strip().lower()).first()


def create_user(
    email: str,
    password: str,
    name: str,
    role: str = ROLE_PRODUCER,
    **profile,
) -> User:
    """Create an account. Role defaults to producer."""
    email = (email or "").strip().lower()
    if not EMAIL_RE.match(email):
        raise ValidationError("A valid email is required")
    if role not in VALID_ROLES:
        raise ValidationError(f"role must be one of: {', '.join(sorted(VALID_ROLES))}")
    if get_user_by_email(email):
        raise ConflictError(f"Email already registered: {email}")

    user = User(
        email=email,
        password=hash_password(password),
        role=role,
        name=name,
        company_name=profile.get("company_name"),
        vat_number=profile.get("vat_number"),
        street=profile.get("street"),
        city=profile.get("city"),
        state=profile.get("state"),
        country=profile.get("country"),
        postal_code=profile.get("postal_code"),
    )
    db.session.add(user)
    db.session.commit()
    return user


def set_certification(user_id: int, cert_type: str, number: str, valid_until, status: str = "active") -> Certification:
    """Create or replace the user's certificate of the given type."""
    if cert_type not in CERTIFICATE_TYPES:
        raise ValidationError(f"cert_type must be one of: {', '.join(CERTIFICATE_TYPES)}")
    expiry = parse_iso_date(valid_until)
    if expiry is None:
        raise ValidationError("valid_until must be a valid date (YYYY-MM-DD)")

    cert = db.session.query(Certification).filter_by(user_id=user_id, type=cert_type).first()
    if cert is None:
        cert = Certification(user_id=user_id, type=cert_type)
        db.session.add(cert)
    cert.number = number
    cert.valid_until = expiry
    cert.status = status
    db.session.commit()
    return cert


def delete_user(user_id: int) -> bool:
    """Delete an account; certificates, grants and offers cascade with it."""
    user = db.session.get(User, user_id)
    if not user:
        return False
    db.session.delete(user)
    db.session.commit()
    return True


def user_to_document(user: User) -> dict:
    """Relational account in the document-profile shape."""
    return {
        "id": str(user.id),
        "email": user.email,
        "role": user.role,
        "name": user.name,
        "companyName": user.company_name,
        "vatNumber": user.vat_number,
        "address": {
            "street": user.street,
            "city": user.city,
            "state": user.state,
            "country": user.country,
            "postalCode": user.postal_code,
        },
        "certifications": {c.type: c.to_dict() for c in user.certifications},
    }


# ----------------------------------------------------------------------
# Document profiles
# ----------------------------------------------------------------------

def list_user_profiles(role: str | None = None) -> list[dict]:
    where = [("role", "==", role)] if role else []
    return get_document_store().query(COLLECTION_USERS, where=where)


def get_user_profile(user_id: str) -> dict | None:
    """Profile document, or None when absent or unreadable."""
    try:
        return get_document_store().get(COLLECTION_USERS, user_id)
    except Exception:
        current_app.logger.exception("Error getting user profile")
        return None


def create_user_profile(user_id: str, profile: dict) -> dict:
    """First-login profile: role defaults to producer, createdAt stamped."""
    data = {
        "role": ROLE_PRODUCER,
        **profile,
        "createdAt": utcnow_iso(),
    }
    return get_document_store().set(COLLECTION_USERS, user_id, data)


def update_user_profile(user_id: str, profile_data: dict) -> bool:
    """
    Merge profile changes into an existing profile.

    Missing profiles are a hard failure (UserNotFoundError), reported to the
    caller as a notice and False like any other persistence error.
    """
    if not user_id:
        show_error("Invalid user ID")
        return False

    with activity.track(SCOPE):
        try:
            store = get_document_store()
            existing = store.get(COLLECTION_USERS, user_id)
            if existing is None:
                raise UserNotFoundError("User profile not found")

            updated = {**profile_data, "updatedAt": utcnow_iso()}
            for key in (*IMMUTABLE_PROFILE_FIELDS, "id"):
                updated.pop(key, None)

            store.set(COLLECTION_USERS, user_id, updated, merge=True)
            show_success("Profile updated successfully")
            return True
        except Exception as e:
            current_app.logger.exception("Error updating profile")
            show_error(str(e))
            return False
