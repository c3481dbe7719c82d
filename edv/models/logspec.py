"""Log spec model for the log level endpoints."""

from pydantic import BaseModel, Field


class LogSpec(BaseModel):
    """Colon-separated module=level pairs plus an optional default level."""

    spec: str = Field(..., description="e.g. 'storage=debug:services=warn:info'")

    model_config = {
        "json_schema_extra": {
            "example": {"spec": "storage=debug:info"}
        }
    }
