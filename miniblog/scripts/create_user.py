"""
Create a user (e.g. the root administrator). Run from project root:
  python -m miniblog.scripts.create_user USERNAME PASSWORD PHONE EMAIL [role]
Example:
  python -m miniblog.scripts.create_user root miniblog1234 13800000000 root@example.com admin

Reads the same configuration sources as the server (MINIBLOG_* env, .env, YAML).
"""
import argparse
import sys

from dotenv import load_dotenv

from miniblog.bootstrap import build_container
from miniblog.core.config import load_settings
from miniblog.core.errors import ErrorX
from miniblog.schemas.user import CreateUserRequest


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = argparse.ArgumentParser(description="Create a MiniBlog user from the command line.")
    parser.add_argument("username", help="Username (3-20 letters, digits or underscores)")
    parser.add_argument("password", help="Password (6+ characters, a letter and a digit)")
    parser.add_argument("phone", help="Mobile phone number")
    parser.add_argument("email", help="Email address")
    parser.add_argument("role", nargs="?", default="user", choices=["user", "admin"])
    parser.add_argument("--nickname", default=None)
    parser.add_argument("-c", "--config", help="Path to the YAML configuration file")
    args = parser.parse_args(argv)

    container = build_container(load_settings(args.config), auto_load_policy=False)
    try:
        rq = CreateUserRequest(
            username=args.username.strip(),
            password=args.password,
            nickname=args.nickname,
            email=args.email,
            phone=args.phone,
        )
        container.validator.validate(None, rq)
        rsp = container.services.user.create(rq)
        if args.role == "admin":
            container.authz.make_admin(rsp.user_id)
    except ErrorX as e:
        print(f"Failed to create user '{args.username}': {e.message}", file=sys.stderr)
        return 1
    finally:
        container.close()
    print(f"Created user '{args.username}' ({rsp.user_id}) with role '{args.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
