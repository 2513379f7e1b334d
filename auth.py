"""
auth.py
Staff authentication (bcrypt hashing, login against the users sheet) and
role-based page access.
"""

from __future__ import annotations

import logging

import bcrypt

from models import ROLES, User
from records import user_from_record
from sheets import SheetsClient, StoreError

logger = logging.getLogger(__name__)

# Pages each role may open
ROLE_PAGES = {
    "Dashboard": ("admin", "partner", "employee"),
    "Members": ("admin", "partner", "employee"),
    "Renewals": ("admin", "partner", "employee"),
    "Transactions": ("admin", "partner", "employee"),
    "Expenses": ("admin", "partner", "employee"),
    "Reports": ("admin", "partner"),
    "Notifications": ("admin", "partner"),
    "Admin": ("admin",),
    "Settings": ("admin", "partner", "employee"),
}


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
    if not password_hash.startswith("$2"):
        # not a bcrypt hash; never compare plaintext
        return False
    try:
        return bcrypt.checkpw(_to_bcrypt_secret(password), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Malformed password hash in users sheet")
        return False


def allowed_pages(role: str) -> list[str]:
    return [page for page, roles in ROLE_PAGES.items() if role in roles]


def can_access(role: str, page: str) -> bool:
    return role in ROLE_PAGES.get(page, ())


def require_role(user: User | None, *roles: str) -> User:
    if user is None or user.role not in roles:
        raise PermissionError(f"This action requires role: {', '.join(roles)}")
    return user


def fetch_users(store: SheetsClient) -> list[User]:
    result = store.get_users()
    if not result.success:
        raise StoreError(result)
    return [user_from_record(r) for r in result.rows("users")]


def login(store: SheetsClient, username: str, password: str) -> User | None:
    """
    None means the credentials did not match. An unreachable users sheet
    raises StoreError instead, so the two are never confused.
    """
    username = username.strip()
    if not username or not password:
        return None
    for user in fetch_users(store):
        if user.username == username:
            if verify_password(password, user.password_hash):
                logger.info("User %s logged in", username)
                return user
            break
    logger.info("Failed login for %s", username)
    return None


def ensure_default_admin(store: SheetsClient, username: str, password: str) -> bool:
    """
    First run: if the users sheet is reachable and empty, create an admin.
    Returns True when an admin was created.
    """
    result = store.get_users()
    if not result.success or result.rows("users"):
        return False
    created = store.add_user(
        {"username": username, "password": hash_password(password), "role": "admin", "name": "Administrator"},
    )
    if created.success:
        logger.info("Created default admin user %s", username)
    else:
        logger.warning("Could not create default admin: %s", created.error)
    return created.success


def add_user(store: SheetsClient, actor: User, username: str, password: str, role: str, name: str,
             phone: str = ""):
    require_role(actor, "admin")
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role}")
    return store.add_user(
        {"username": username.strip(), "password": hash_password(password), "role": role,
         "name": name.strip(), "phone": phone.strip()},
        actor=actor,
    )


def delete_user(store: SheetsClient, actor: User, user: User):
    require_role(actor, "admin")
    if user.id == actor.id:
        raise ValueError("You cannot delete your own account")
    return store.delete_user(user.id, actor=actor)


def change_password(store: SheetsClient, user: User, new_password: str):
    return store.update_user(
        user.id,
        {"username": user.username, "password": hash_password(new_password), "role": user.role,
         "name": user.name, "phone": user.phone},
        actor=user,
    )
