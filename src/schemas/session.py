"""Authenticated session handle."""

from pydantic import BaseModel, SecretStr


class Session(BaseModel):
    """Opaque handle returned by a successful login.

    Only the metadata client reads its fields; the download pipeline passes
    it through untouched.

    Attributes:
        user_id: Account identifier on the content service
        access_token: Bearer token for authenticated requests
    """

    user_id: str
    access_token: SecretStr

    model_config = {"frozen": True}

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token.get_secret_value()}"}
