import logging
from datetime import datetime
from typing import Any, Dict, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from prepwise.core.errors import PrepwiseError
from prepwise.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

USERS = "users"

class AuthService:
    """Sign-up, sign-in and current-user lookups backed by the users collection."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def _find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        users = await self.store.query(USERS, filters=[('email', '==', email.lower())], limit=1)
        return users[0] if users else None

    @staticmethod
    def _public(user: Dict[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in user.items() if k != 'password_hash'}

    async def sign_up(self, name: str, email: str, password: str) -> Dict[str, Any]:
        try:
            if await self._find_by_email(email):
                return {"success": False, "message": "User already exists. Please sign in."}

            user_id = await self.store.add(USERS, {
                "name": name,
                "email": email.lower(),
                "password_hash": generate_password_hash(password),
                "created_at": datetime.now().isoformat(),
            })
            logger.info(f"Created user {user_id}")
            return {"success": True, "message": "Account created successfully. Please sign in."}

        except PrepwiseError as e:
            logger.error(f"Error creating user: {e}")
            return {"success": False, "message": "Failed to create account. Please try again."}

    async def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        try:
            user = await self._find_by_email(email)
            if not user:
                return {"success": False, "message": "User does not exist. Create an account."}

            if not check_password_hash(user.get('password_hash', ''), password):
                return {"success": False, "message": "Invalid email or password."}

            logger.info(f"User {user['id']} signed in")
            return {"success": True, "message": "Signed in successfully.", "user_id": user['id']}

        except PrepwiseError as e:
            logger.error(f"Error signing in: {e}")
            return {"success": False, "message": "Failed to log into account. Please try again."}

    async def get_current_user(self, user_id: Optional[str]) -> Optional[Dict[str, Any]]:
        """Resolve the session's user id to a user document without its password hash."""
        if not user_id:
            return None

        try:
            user = await self.store.get(USERS, user_id)
        except PrepwiseError as e:
            logger.warning(f"Could not resolve current user {user_id}: {e}")
            return None

        return self._public(user) if user else None

    async def is_authenticated(self, user_id: Optional[str]) -> bool:
        return await self.get_current_user(user_id) is not None
