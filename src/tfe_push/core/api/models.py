"""Typed views over the JSON:API documents the service returns."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

ACTIVE_RUN_STATUSES = frozenset({"pending", "planning", "applying", "confirmed"})


class ConfigurationVersion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    upload_url: str

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "ConfigurationVersion":
        data = document["data"]
        return cls(id=data["id"], upload_url=data["attributes"]["upload-url"])


class Run(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    status: str
    configuration_version_id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_RUN_STATUSES

    @classmethod
    def from_resource(cls, resource: Dict[str, Any]) -> "Run":
        relationship = (resource.get("relationships") or {}).get(
            "configuration-version"
        ) or {}
        cv_data = relationship.get("data") or {}
        return cls(
            id=resource["id"],
            status=resource["attributes"]["status"],
            configuration_version_id=cv_data.get("id"),
        )


class WorkspaceLock(BaseModel):
    model_config = ConfigDict(frozen=True)

    locked: bool
    locked_by: Optional[str] = Field(default=None)

    def held_by_other(self, run_id: str) -> bool:
        return self.locked and self.locked_by != run_id

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "WorkspaceLock":
        data = document["data"]
        locked = data["attributes"]["locked"]
        owner = None
        if locked:
            relationship = (data.get("relationships") or {}).get("locked-by") or {}
            owner = (relationship.get("data") or {}).get("id")
        return cls(locked=locked, locked_by=owner)
