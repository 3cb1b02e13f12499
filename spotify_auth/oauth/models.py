"""
Response models for the relay endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field


class DebugResponse(BaseModel):
    """
    Values /login would compute for the same request.

    Serialized with the key names the diagnostic output has always used
    (``PORT``, ``returnUrl``, ``authQuery``, ``authUrl``).
    """

    port: int = Field(alias="PORT", description="Configured listening port")
    redirect_uri: str = Field(description="Callback URL sent to the provider")
    return_url: str = Field(alias="returnUrl", description="Resolved return URL")
    scope: list[str] = Field(description="Resolved scope list")
    auth_query: dict[str, str] = Field(
        alias="authQuery", description="Authorization query parameters"
    )
    auth_url: str = Field(alias="authUrl", description="Full provider authorization URL")

    model_config = ConfigDict(populate_by_name=True)


class HealthResponse(BaseModel):
    """Health check payload."""

    status: str
    service: str | None = None
    timestamp: str | None = None
