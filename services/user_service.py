# services/user_service.py
"""
User Service - registration and lookup.

Login is passwordless: a registered email is exchanged for a bearer token
(see ``dependencies.create_access_token``).
"""
import logging
from datetime import datetime, timezone

from schemas.user import User, RegisterRequest
from services.exceptions import NotFoundError, StateConflictError, ValidationError
from services.record_store import Collection, RecordStore, find_by_id

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
     return email.strip().lower()


class UserService:

     def __init__(self, store: RecordStore):
          self.store = store

     def register(self, payload: RegisterRequest) -> User:
          """
          Create a user with the given role.

          Raises:
               ValidationError: Email is malformed or name is blank
               StateConflictError: Email already registered
          """
          email = normalize_email(payload.email)
          if "@" not in email or email.startswith("@") or email.endswith("@"):
               raise ValidationError("Invalid email address")
          name = payload.name.strip()
          if not name:
               raise ValidationError("Name is required")

          with self.store.unit_of_work():
               users = self.store.read_all(Collection.USERS)
               if any(u.email == email for u in users):
                    raise StateConflictError("User with this email already exists")
               user = User(
                    id=self.store.generate_id("u"),
                    name=name,
                    email=email,
                    role=payload.role,
                    verified=False,
                    created_at=datetime.now(timezone.utc),
               )
               users.append(user)
               self.store.write_all(Collection.USERS, users)

          logger.info("Registered %s user %s", user.role.value, user.id)
          return user

     def get_by_email(self, email: str) -> User:
          email = normalize_email(email)
          user = next((u for u in self.store.read_all(Collection.USERS) if u.email == email), None)
          if user is None:
               raise NotFoundError("User not found")
          return user

     def get_user(self, user_id: str) -> User:
          user = find_by_id(self.store.read_all(Collection.USERS), user_id)
          if user is None:
               raise NotFoundError("User not found")
          return user
