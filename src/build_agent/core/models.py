"""Core data models for the build agent server utilities."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DeploymentKind(str, Enum):
    """Server deployment type enum."""

    UNDETERMINED = "none"
    HOSTED = "hosted"
    ON_PREMISES = "onPremises"

    @classmethod
    def parse(cls, value: Any) -> "DeploymentKind":
        """Parse a wire value (name, camelCase string or numeric flag)."""
        if isinstance(value, cls):
            return value
        # bool is an int subclass; a flag value is never a bool
        if isinstance(value, int) and not isinstance(value, bool):
            flags = {0: cls.UNDETERMINED, 1: cls.HOSTED, 2: cls.ON_PREMISES}
            if value in flags:
                return flags[value]
        elif isinstance(value, str):
            normalized = value.strip().lower().replace("_", "")
            for kind in cls:
                if normalized in (kind.value.lower(), kind.name.lower().replace("_", "")):
                    return kind
        raise ValueError(f"Unknown deployment type: {value!r}")


class ConnectionData(BaseModel):
    """Server connection data (subset of the _apis/connectionData document)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    instance_id: Optional[str] = Field(None, alias="instanceId", description="Server instance ID")
    deployment_id: Optional[str] = Field(None, alias="deploymentId", description="Deployment ID")
    deployment_type: DeploymentKind = Field(
        DeploymentKind.UNDETERMINED,
        alias="deploymentType",
        description="Hosted or on-premises",
    )
    authenticated_user: Optional[Dict[str, Any]] = Field(
        None,
        alias="authenticatedUser",
        description="Identity the request was authenticated as",
    )
    last_user_access: Optional[datetime] = Field(None, alias="lastUserAccess")

    @field_validator("deployment_type", mode="before")
    @classmethod
    def parse_deployment_type(cls, v: Any) -> DeploymentKind:
        """Accept every wire form of the deployment type."""
        if v is None:
            return DeploymentKind.UNDETERMINED
        return DeploymentKind.parse(v)

    @property
    def authenticated_user_name(self) -> Optional[str]:
        """Display name of the authenticated identity, if any."""
        if not self.authenticated_user:
            return None
        return self.authenticated_user.get("providerDisplayName") or self.authenticated_user.get("customDisplayName")
