from records.config import Profile, RepositoryBackend
from records.schemas.base import ApiModel


class DatabaseInfoResponse(ApiModel):
    type: str
    location: str
    purpose: str
    console_enabled: bool


class FeatureToggleResponse(ApiModel):
    name: str
    enabled: bool


class InfoResponse(ApiModel):
    """Application name, active profile and what that profile switches on."""

    name: str
    environment: Profile
    description: str
    repository_backend: RepositoryBackend
    database: DatabaseInfoResponse
    features: list[FeatureToggleResponse]
