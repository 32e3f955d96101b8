"""
auth.py
Owner accounts (bcrypt hashing, verify, sign-in, change password).
The signed-in owner's id scopes every row in the store.
"""

from __future__ import annotations

import bcrypt

import config
import db
import utils


class AuthError(Exception):
    pass


def _to_bcrypt_secret(password: str) -> bytes:
    """
    bcrypt only uses the first 72 BYTES of the password.
    We truncate to 72 bytes to avoid ValueError and to make behavior explicit.
    """
    pw = password.encode("utf-8")
    if len(pw) > 72:
        pw = pw[:72]
    return pw


def hash_password(password: str) -> str:
    secret = _to_bcrypt_secret(password)
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(secret, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(_to_bcrypt_secret(password), password_hash.encode("utf-8"))


def email_allowed(email: str, allowed: str | None = None) -> bool:
    allowed = config.ADMIN_EMAIL if allowed is None else allowed
    return bool(email) and (not allowed or email.strip().lower() == allowed.strip().lower())


def get_owner_by_email(email: str):
    return db.fetch_one("SELECT * FROM owners WHERE email = ?", (email.strip().lower(),))


def register_owner(email: str, password: str) -> str:
    email = email.strip().lower()
    if not email_allowed(email):
        raise AuthError("This email is not allowed.")
    if len(password) < 6:
        raise AuthError("Password must be at least 6 characters.")
    if get_owner_by_email(email):
        raise AuthError("An account with this email already exists.")
    owner_id = utils.uid("owner")
    db.execute(
        "INSERT INTO owners(id, email, password_hash, created_at) VALUES(?,?,?,?)",
        (owner_id, email, hash_password(password), db.utc_now_iso()),
    )
    return owner_id


def sign_in(email: str, password: str) -> str:
    """Returns the owner id. The allowed-email gate runs before the password check."""
    if not email_allowed(email):
        raise AuthError("This email is not allowed.")
    owner = get_owner_by_email(email)
    if not owner or not verify_password(password, owner["password_hash"]):
        raise AuthError("Invalid email or password.")
    return owner["id"]


def change_password(owner_id: str, new_password: str) -> None:
    if len(new_password) < 6:
        raise AuthError("Password must be at least 6 characters.")
    db.execute(
        "UPDATE owners SET password_hash = ? WHERE id = ?",
        (hash_password(new_password), owner_id),
    )
