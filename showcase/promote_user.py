"""Set the role of an existing account, e.g. to bootstrap the first admin.

Usage:
    python -m showcase.promote_user someone@example.edu [--role admin]
"""
import argparse
import sys

from sqlalchemy.exc import SQLAlchemyError

from showcase.database import build_engine, build_session_factory, create_schema
from showcase.models.user import Role, User


def promote(session_factory, email: str, role: Role) -> User | None:
    db = session_factory()
    try:
        user = db.query(User).filter(User.email == email.strip().lower()).first()
        if user is None:
            return None
        user.role = role.value
        db.commit()
        db.refresh(user)
        return user
    finally:
        db.close()


def main(argv: list[str] | None = None, database_url: str | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument('email')
    parser.add_argument('--role', choices=[role.value for role in Role], default=Role.ADMIN.value)
    args = parser.parse_args(argv)

    engine = build_engine(database_url)
    try:
        create_schema(engine)
        user = promote(build_session_factory(engine), args.email, Role(args.role))
    except SQLAlchemyError as exc:
        print(f'Database error: {exc}', file=sys.stderr)
        return 1
    finally:
        engine.dispose()

    if user is None:
        print(f'No user registered with email {args.email}', file=sys.stderr)
        return 1

    print(f'{user.email} is now {user.role}')
    return 0


if __name__ == '__main__':
    sys.exit(main())
