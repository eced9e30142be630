"""Profile-dependent environment description.

Which database sits behind the app and which optional features are switched
on depend on the deployment profile. Each lookup takes the profile
explicitly, so nothing here reads global state.
"""

from dataclasses import dataclass

from records.config import Profile


@dataclass(frozen=True)
class DatabaseInfo:
    type: str
    location: str
    purpose: str
    console_enabled: bool


@dataclass(frozen=True)
class FeatureToggle:
    name: str
    enabled: bool


_DATABASES: dict[Profile, DatabaseInfo] = {
    Profile.DEV: DatabaseInfo("SQLite", "In-Memory", "Development", console_enabled=True),
    Profile.TEST: DatabaseInfo("SQLite", "In-Memory", "Testing", console_enabled=False),
    Profile.PROD: DatabaseInfo("PostgreSQL", "Docker Container", "Production", console_enabled=False),
}


def database_info(profile: Profile) -> DatabaseInfo:
    return _DATABASES[Profile(profile)]


def feature_toggles(profile: Profile) -> list[FeatureToggle]:
    """Features active for a profile.

    - db-console: dev and test only
    - production-monitoring: prod only
    - debug-logging: everything except prod
    """
    profile = Profile(profile)
    toggles: list[FeatureToggle] = []
    if profile in (Profile.DEV, Profile.TEST):
        toggles.append(FeatureToggle("db-console", enabled=True))
    if profile is Profile.PROD:
        toggles.append(FeatureToggle("production-monitoring", enabled=True))
    if profile is not Profile.PROD:
        toggles.append(FeatureToggle("debug-logging", enabled=True))
    return toggles
