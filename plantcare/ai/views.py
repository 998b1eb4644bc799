"""AI routes: identification, recommendations, questions, health checks, care review and import."""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import ValidationError

from plantcare.ai.importing import (
    ImportPlantsRequest,
    ImportPlantsResponse,
    ImportPreviewResponse,
    plants_from_import,
    rooms_to_create,
    unmatched_room_names,
)
from plantcare.ai.models import (
    AIPlantQuestionResponse,
    ApplyRevisionsRequest,
    ApplySuggestionRequest,
    HealthCheckRequest,
    HealthCheckResponse,
    IdentifyPlantRequest,
    IdentifyPlantResponse,
    PlantCareVibeCheckResponse,
    PlantQuestionRequest,
    RecommendationRequest,
    RecommendedPlantResponse,
)
from plantcare.ai.openai_service import UNKNOWN_PLANT, OpenAIService
from plantcare.ai.suggestions import (
    apply_care_revisions,
    apply_change_suggestion,
    care_steps_from_recommendation,
    resolve_recommended_spaces,
)
from plantcare.core.dependencies import get_ai_service, get_store
from plantcare.core.exceptions import BadRequestException, NotFoundException
from plantcare.plants import care_engine
from plantcare.plants.models import Plant
from plantcare.store.data_store import DataStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["AI"])


@router.post("/recommendation", response_model=RecommendedPlantResponse)
async def recommend_plant_care(
    request: RecommendationRequest,
    store: DataStore = Depends(get_store),
    ai_service: OpenAIService = Depends(get_ai_service),
):
    """
    Get care recommendations for a plant the user wants to add.

    - Care steps are built from the suggested frequencies (not saved)
    - Recommended spaces are matched to existing rooms and zones by name
    """
    rooms, zones = store.list_rooms(), store.list_zones()
    recommendation = await ai_service.generate_plant_recommendation(
        request.plant_name, rooms, zones, request.preference
    )
    return RecommendedPlantResponse(
        recommendation=recommendation,
        care_steps=care_steps_from_recommendation(recommendation),
        recommended_space_ids=resolve_recommended_spaces(
            recommendation.recommended_spaces, rooms, zones
        ),
    )


@router.post("/plants/{plant_id}/ask", response_model=AIPlantQuestionResponse)
async def ask_about_plant(
    plant_id: UUID,
    request: PlantQuestionRequest,
    store: DataStore = Depends(get_store),
    ai_service: OpenAIService = Depends(get_ai_service),
):
    """Ask a question about a plant, optionally with a photo."""
    plant = store.get_plant(plant_id)
    return await ai_service.ask_plant_question(
        request.question,
        plant,
        store.list_rooms(),
        store.list_zones(),
        photo_base64=request.photo_base64,
        tz=store.tz,
    )


@router.post("/plants/{plant_id}/apply-suggestion", response_model=Plant)
async def apply_suggestion(
    plant_id: UUID,
    request: ApplySuggestionRequest,
    store: DataStore = Depends(get_store),
):
    """Apply the selected changes from an AI answer to a plant and save it."""
    plant = store.get_plant(plant_id)
    try:
        updated = apply_change_suggestion(
            plant, request.suggestion, store.list_rooms(), store.list_zones(), request.selected
        )
    except (ValidationError, ValueError) as e:
        raise BadRequestException(f"Could not apply suggestion: {e}")
    logger.info(f"Applied AI suggestion to plant {plant_id}")
    return await store.update_plant(updated)


@router.post("/identify", response_model=IdentifyPlantResponse)
async def identify_plant(
    request: IdentifyPlantRequest,
    ai_service: OpenAIService = Depends(get_ai_service),
):
    """Identify a plant from a photo as "Common Name (Latin name)"."""
    name = await ai_service.identify_plant(request.photo_base64)
    return IdentifyPlantResponse(name=name, identified=name.lower() != UNKNOWN_PLANT.lower())


@router.post("/plants/{plant_id}/health-check", response_model=HealthCheckResponse)
async def health_check_plant(
    plant_id: UUID,
    request: HealthCheckRequest,
    store: DataStore = Depends(get_store),
    ai_service: OpenAIService = Depends(get_ai_service),
):
    """
    Check a plant's health from up to three recent photos.

    The feedback and the check time are saved on the plant.
    """
    plant = store.get_plant(plant_id)
    reply = await ai_service.perform_plant_health_check(
        plant, request.photos_base64, store.list_rooms(), store.list_zones(), tz=store.tz
    )
    plant.last_health_check_feedback = reply.feedback
    plant.last_health_check_date = care_engine.resolve_now(tz=store.tz)
    await store.update_plant(plant)
    return HealthCheckResponse(
        plant_id=plant.id,
        feedback=reply.feedback,
        checked_at=plant.last_health_check_date,
    )


@router.post("/vibe-check", response_model=PlantCareVibeCheckResponse)
async def vibe_check(
    store: DataStore = Depends(get_store),
    ai_service: OpenAIService = Depends(get_ai_service),
):
    """Review the care of every plant; nothing is changed until revisions are applied."""
    plants = store.list_plants()
    if not plants:
        raise BadRequestException("Add some plants before asking for a care review")
    return await ai_service.perform_plant_care_vibe_check(
        plants, store.list_rooms(), store.list_zones(), tz=store.tz
    )


@router.post("/vibe-check/apply", response_model=List[Plant])
async def apply_vibe_check(
    request: ApplyRevisionsRequest,
    store: DataStore = Depends(get_store),
):
    """Apply the accepted care-review revisions; returns the plants that changed."""
    try:
        changed = apply_care_revisions(store.list_plants(), request.revisions)
    except ValueError as e:
        raise BadRequestException(f"Could not apply revisions: {e}")
    if changed:
        await store.update_plants(changed)
    logger.info(f"Applied {len(request.revisions)} care revisions to {len(changed)} plants")
    return changed


@router.post("/import/preview", response_model=ImportPreviewResponse)
async def preview_import(
    request: ImportPlantsRequest,
    store: DataStore = Depends(get_store),
):
    """Room names in an import that need mapping to a room before importing."""
    return ImportPreviewResponse(
        plant_count=len(request.plants),
        unmatched_rooms=unmatched_room_names(request.plants, store.list_rooms()),
    )


@router.post("/import", response_model=ImportPlantsResponse, status_code=status.HTTP_201_CREATED)
async def import_plants(
    request: ImportPlantsRequest,
    store: DataStore = Depends(get_store),
):
    """
    Import plants exported as JSON from an AI chat.

    - Rooms are matched by name, case-insensitively
    - Unknown room names follow ``room_mappings``: an existing room, a new room, or unassigned
    - Watering frequency, humidity and rotation are estimated from the text
    """
    rooms = store.list_rooms()
    for mapping in request.room_mappings:
        if mapping.matched_room_id is not None and not any(r.id == mapping.matched_room_id for r in rooms):
            raise NotFoundException(f"Room for {mapping.unmatched_room!r} not found")

    unmatched = set(unmatched_room_names(request.plants, rooms))
    created = rooms_to_create(
        [m for m in request.room_mappings if m.unmatched_room in unmatched],
        store.next_room_order_index(),
    )
    try:
        plants = plants_from_import(request.plants, [*rooms, *created.values()], request.room_mappings)
    except ValueError as e:
        raise BadRequestException(f"Invalid import: {e}")
    await store.import_plants(plants, list(created.values()))
    return ImportPlantsResponse(plants=plants, created_rooms=list(created.values()))
