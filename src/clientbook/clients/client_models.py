from typing import Optional

from pydantic import BaseModel, ConfigDict


class ClientRecord(BaseModel):
    """One persisted client. id=None means the store assigns it on insert."""

    id: Optional[int] = None
    name: str
    email: str
    external_ref: str


class RemoteUser(BaseModel):
    """User shape returned by the remote API; unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    email: str
    username: str

    def to_client_record(self) -> ClientRecord:
        return ClientRecord(
            id=self.id,
            name=self.name,
            email=self.email,
            external_ref=self.username,
        )
