"""Officer endpoints."""

from fastapi import APIRouter, Request, Response

from records.dependencies import Officers
from records.exceptions import RequestValidationFailed
from records.models import Rank
from records.schemas.officer import OfficerRequest, OfficerResponse
from records.services.officer import OfficerFields
from records.validation import validate_officer_request

router = APIRouter(prefix="/api/v1/officers", tags=["officers"])


@router.get("", response_model=list[OfficerResponse])
async def list_officers(officers: Officers, rank: Rank | None = None) -> list[OfficerResponse]:
    """All officers, optionally only those holding ``rank``."""
    return [OfficerResponse.model_validate(o) for o in await officers.list_officers(rank)]


@router.post("", response_model=OfficerResponse, status_code=201)
async def create_officer(
    request: Request, response: Response, body: OfficerRequest, officers: Officers
) -> OfficerResponse:
    violations = validate_officer_request(body)
    if violations:
        raise RequestValidationFailed(violations)

    officer = await officers.create_officer(
        OfficerFields(rank=body.rank, last_name=body.last_name, first_name=body.first_name)  # type: ignore[arg-type]
    )
    response.headers["Location"] = str(request.url_for("get_officer", officer_id=officer.id))
    return OfficerResponse.model_validate(officer)


@router.get("/{officer_id}", response_model=OfficerResponse)
async def get_officer(officer_id: int, officers: Officers) -> OfficerResponse:
    return OfficerResponse.model_validate(await officers.get_officer(officer_id))


@router.delete("/{officer_id}", status_code=204)
async def delete_officer(officer_id: int, officers: Officers) -> None:
    await officers.delete_officer(officer_id)
