"""Table sessions: signed tokens and an in-memory store with expiry."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from uuid import uuid4

from itsdangerous import BadSignature, URLSafeTimedSerializer

from config import config
from holdem21.game import Holdem21Game

TOKEN_SALT = "holdem21-table"


class SessionSigner:
    """Sign and verify table tokens using itsdangerous."""

    def __init__(self, secret_key: str | None = None) -> None:
        self._serializer = URLSafeTimedSerializer(
            secret_key or config.security.secret_key,
            salt=TOKEN_SALT,
        )

    def sign(self, session_id: str) -> str:
        return self._serializer.dumps(session_id)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """
        Recover the session ID from a token.

        Returns None for tampered, foreign or expired tokens.
        """
        try:
            return self._serializer.loads(token, max_age=max_age or config.session_ttl)
        except BadSignature:
            # SignatureExpired is a BadSignature too
            return None


_session_signer: SessionSigner | None = None


def get_session_signer() -> SessionSigner:
    """Get or create the process-wide signer."""
    global _session_signer
    if _session_signer is None:
        _session_signer = SessionSigner()
    return _session_signer


def extract_session_id(token: str) -> str | None:
    """Raw session ID from a signed token, or None if the token is invalid."""
    return get_session_signer().unsign(token)


@dataclass
class TableSession:
    """One player's table and its bookkeeping."""

    table: Holdem21Game
    expires_at: datetime
    created_at: datetime = field(default_factory=datetime.now)
    last_activity: datetime = field(default_factory=datetime.now)

    @property
    def hands_played(self) -> int:
        return self.table.hand_number

    @property
    def expired(self) -> bool:
        return self.expires_at < datetime.now()


class TableSessionStore:
    """
    In-memory table sessions keyed by signed token.

    Sessions end with the process; every touch pushes the expiry back by
    ``ttl`` seconds.
    """

    def __init__(self, ttl: int | None = None) -> None:
        self._ttl = ttl or config.session_ttl
        self._sessions: dict[str, TableSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def _expiry(self, ttl: int | None = None) -> datetime:
        return datetime.now() + timedelta(seconds=ttl or self._ttl)

    async def open(self, table: Holdem21Game, ttl: int | None = None) -> str:
        """Store a new table and return its signed token."""
        token = get_session_signer().sign(str(uuid4()))
        self._sessions[token] = TableSession(table=table, expires_at=self._expiry(ttl))
        return token

    async def get(self, token: str) -> TableSession | None:
        """Live session for ``token``; expired sessions are dropped on access."""
        session = self._sessions.get(token)
        if session is None:
            return None
        if session.expired:
            await self.close(token)
            return None
        return session

    async def exists(self, token: str) -> bool:
        return await self.get(token) is not None

    async def touch(self, token: str) -> bool:
        """Record activity and restart the TTL. False when the session is gone."""
        session = await self.get(token)
        if session is None:
            return False
        session.last_activity = datetime.now()
        session.expires_at = self._expiry()
        return True

    async def replace_table(self, token: str, table: Holdem21Game) -> bool:
        """Seat a fresh table in an existing session."""
        session = await self.get(token)
        if session is None:
            return False
        session.table = table
        session.created_at = datetime.now()
        return await self.touch(token)

    async def close(self, token: str) -> None:
        self._sessions.pop(token, None)

    async def cleanup_expired(self) -> int:
        """Remove expired sessions and return how many went."""
        expired = [token for token, session in self._sessions.items() if session.expired]
        for token in expired:
            del self._sessions[token]
        return len(expired)


_session_store: TableSessionStore | None = None


def get_session_store() -> TableSessionStore:
    """Get or create the process-wide store."""
    global _session_store
    if _session_store is None:
        _session_store = TableSessionStore()
    return _session_store
