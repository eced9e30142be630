from records.models import Rank
from records.schemas.base import ApiModel


class OfficerRequest(ApiModel):
    rank: Rank | None = None
    first_name: str | None = None
    last_name: str | None = None


class OfficerResponse(ApiModel):
    id: int
    rank: Rank
    first_name: str | None
    last_name: str
