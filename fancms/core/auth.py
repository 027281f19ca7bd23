"""
Role checks for CMS users.

There is no session: the caller's identity is whatever the client sends
(``X-User-Id`` / ``X-User-Role``). These helpers only decide what a given
role may do.
"""

import secrets
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from .schema import ROLES, User, dump_record


@dataclass
class Caller:
    user_id: str
    role: str


def role_level(role: Optional[str]) -> int:
    """Position on the AUTHOR < EDITOR < ADMIN ladder; -1 for unknown roles."""
    if role not in ROLES:
        return -1
    return ROLES.index(role)


def has_role(caller: Optional[Caller], required_role: str) -> bool:
    if caller is None:
        return False
    return role_level(caller.role) >= role_level(required_role)


def is_admin(caller: Optional[Caller]) -> bool:
    return has_role(caller, 'ADMIN')


def can_edit_post(user_id: str, author_id: str, role: str) -> bool:
    """Editors and admins edit any post; authors only their own."""
    if role_level(role) >= role_level('EDITOR'):
        return True
    return role == 'AUTHOR' and user_id == author_id


def authenticate(users: Sequence[User], username: str, password: str) -> Optional[User]:
    """Return the user whose username and password match, else None."""
    user = next((u for u in users if u.username == username), None)
    if user is None or user.password is None:
        return None
    if not secrets.compare_digest(user.password.encode('utf-8'), password.encode('utf-8')):
        return None
    return user


def public_user(user: User) -> Dict[str, Any]:
    """User as returned to clients: no password or password hash."""
    data = dump_record(user)
    data.pop('password', None)
    data.pop('passwordHash', None)
    return data
