"""Saved custom journey endpoints."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select

from boothboss.core.deps import CurrentUser, DBSession, get_user_id
from boothboss.models.journey import Journey
from boothboss.schemas.journey import JourneyResponse, JourneySave

router = APIRouter()


@router.get(
    "",
    response_model=list[JourneyResponse],
    summary="List journeys",
)
async def list_journeys(user: CurrentUser, db: DBSession) -> list[JourneyResponse]:
    """List the user's saved journeys, most recently updated first."""
    query = (
        select(Journey)
        .where(Journey.user_id == get_user_id(user))
        .order_by(Journey.updated_at.desc())
    )
    journeys = (await db.execute(query)).scalars().all()
    return [JourneyResponse.model_validate(j) for j in journeys]


@router.post(
    "",
    response_model=JourneyResponse,
    summary="Save journey",
    description="Create a journey, or replace the one with the given id.",
)
async def save_journey(data: JourneySave, user: CurrentUser, db: DBSession) -> JourneyResponse:
    """Upsert a journey by id."""
    user_id = get_user_id(user)
    pages = [page.model_dump() for page in data.pages]

    journey = None
    if data.id is not None:
        journey = (
            await db.execute(
                select(Journey).where(Journey.id == data.id, Journey.user_id == user_id)
            )
        ).scalar_one_or_none()
        if journey is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Journey not found",
            )

    if journey is None:
        journey = Journey(user_id=user_id, name=data.name, pages=pages)
        db.add(journey)
    else:
        journey.name = data.name
        journey.pages = pages

    await db.commit()
    await db.refresh(journey)
    return JourneyResponse.model_validate(journey)


@router.delete(
    "/{journey_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete journey",
)
async def delete_journey(journey_id: UUID, user: CurrentUser, db: DBSession) -> None:
    journey = (
        await db.execute(
            select(Journey).where(Journey.id == journey_id, Journey.user_id == get_user_id(user))
        )
    ).scalar_one_or_none()
    if journey is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Journey not found",
        )
    await db.delete(journey)
    await db.commit()
