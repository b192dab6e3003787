"""Small CLI helpers installed as console scripts (see pyproject.toml).

Usage (from project root):
  runserver --host=0.0.0.0 --port=8000 --no-reload
  run-tests
  migrate                   # defaults to `alembic upgrade head`
  init-env                  # copies .env.example -> .env if missing
  grant-admin user@example.com
"""
from __future__ import annotations

import sys
import shutil
import subprocess
from pathlib import Path
from typing import List


def _args() -> List[str]:
    return sys.argv[1:]


def runserver() -> None:
    """Run Uvicorn programmatically. Accepts simple flags:

    --host=<host>  (default 127.0.0.1)
    --port=<port>  (default 8000)
    --no-reload    (disable auto-reload)
    --reload       (enable auto-reload)
    """
    try:
        import uvicorn
    except ImportError:
        print("uvicorn is not installed in the environment. Run `pip install uvicorn[standard]`.")
        raise

    host = "127.0.0.1"
    port = 8000
    reload = True

    for a in _args():
        if a.startswith("--host="):
            host = a.split("=", 1)[1]
        elif a.startswith("--port="):
            try:
                port = int(a.split("=", 1)[1])
            except ValueError:
                print(f"Ignoring invalid port: {a}")
        elif a == "--no-reload":
            reload = False
        elif a == "--reload":
            reload = True

    print(f"Starting uvicorn on {host}:{port} (reload={reload})")
    uvicorn.run("app.main:app", host=host, port=port, reload=reload)


def run_tests() -> None:
    """Run pytest with any forwarded args."""
    args = _args()
    cmd = ["pytest"] + args
    subprocess.run(cmd, check=True)


def run_migrations() -> None:
    """Run alembic. If no args provided, runs `alembic upgrade head`."""
    args = _args()
    if args:
        cmd = ["alembic"] + args
    else:
        cmd = ["alembic", "upgrade", "head"]
    subprocess.run(cmd, check=True)


def init_env() -> None:
    """Copy `.env.example` to `.env` if `.env` is missing."""
    root = Path(__file__).resolve().parents[1]
    src = root / ".env.example"
    dst = root / ".env"
    if dst.exists():
        print(f".env already exists at {dst}")
        return
    if not src.exists():
        print(f".env.example not found at {src}")
        return
    shutil.copy(src, dst)
    print(f"Created .env from .env.example at {dst}")


def grant_admin() -> None:
    """Give an existing user admin rights: `grant-admin <email>`."""
    args = _args()
    if len(args) != 1:
        print("Usage: grant-admin <email>")
        sys.exit(2)

    from app.core.database import SessionLocal
    from app.services.auth_service import AuthService
    from app.utils.errors import UserNotFoundError

    db = SessionLocal()
    try:
        admin = AuthService.grant_admin(db, args[0])
    except UserNotFoundError:
        print(f"No user with email {args[0]}")
        sys.exit(1)
    finally:
        db.close()
    print(f"User {admin.user_id} is now an admin")


if __name__ == "__main__":
    # Allow running the helpers directly: python -m app.cli runserver
    if len(sys.argv) <= 1:
        print(__doc__)
        sys.exit(0)
    cmd = sys.argv[1]
    sys.argv.pop(1)
    if cmd == "runserver":
        runserver()
    elif cmd in ("run-tests", "tests", "test"):
        run_tests()
    elif cmd in ("migrate", "alembic"):
        run_migrations()
    elif cmd in ("init-env", "initenv"):
        init_env()
    elif cmd == "grant-admin":
        grant_admin()
    else:
        print(f"Unknown command: {cmd}")
