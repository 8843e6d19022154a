# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Bootstrap script – creates the first admin user, or resets its password.

Run after the initial migration:
    python bin/seed_admin.py

The script reads FIRST_ADMIN_USERNAME and FIRST_ADMIN_PASSWORD from
etc/app.conf.  If an account with that username exists its password is
overwritten and it is made an active, approved admin; otherwise the account
is created.  Running it again is how a locked-out operator regains access.
"""

import sys
import os

# ---------------------------------------------------------------------------
# Path setup so backend modules are importable
# ---------------------------------------------------------------------------
# bin/seed_admin.py  →  ../  →  project root
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_BACKEND_DIR  = os.path.join(_PROJECT_ROOT, "backend")
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from core.config import settings          # noqa: E402
from core.security import hash_password   # noqa: E402
from database import session_scope        # noqa: E402
from models.user import User              # noqa: E402


def seed():
    username = settings.first_admin_username
    if not username or not settings.first_admin_password:
        print("[seed_admin] FIRST_ADMIN_USERNAME or FIRST_ADMIN_PASSWORD not set in etc/app.conf – nothing to do.")
        return 1

    with session_scope() as db:
        admin = db.query(User).filter(User.username == username).first()
        if admin:
            action = "updated"
        else:
            admin = User(username=username)
            db.add(admin)
            action = "created"

        admin.password_hash = hash_password(settings.first_admin_password)
        admin.role = "admin"
        admin.is_active = True
        admin.is_approved = True
        db.commit()
        print(f"[seed_admin] Admin '{username}' {action} successfully.")
        return 0


if __name__ == "__main__":
    sys.exit(seed())
