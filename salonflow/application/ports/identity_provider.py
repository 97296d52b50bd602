from dataclasses import dataclass, asdict
from typing import Any, Dict, Protocol


@dataclass
class AuthSession:
    access_token: str
    refresh_token: str
    expires_at: int  # epoch seconds
    user_id: str
    phone: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at,
            "user": {"id": self.user_id, "phone": self.phone},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthSession":
        user = data.get("user") or {}
        return cls(
            access_token=data["access_token"],
            refresh_token=data["refresh_token"],
            expires_at=int(data["expires_at"]),
            user_id=str(user["id"]),
            phone=str(user["phone"]),
        )


class IdentityProvider(Protocol):
    def resolve_session(self, phone: str) -> AuthSession:
        """Find or create the phone-authenticated identity and sign it in.

        Must be idempotent per phone: repeated calls never create a second account.
        """
        ...
