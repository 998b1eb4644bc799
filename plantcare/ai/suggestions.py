"""Turn AI output into care steps and plant edits.

Pure functions: nothing here calls the AI service or touches the store.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Set
from uuid import UUID

from plantcare.ai.models import AIPlantRecommendation, PlantCareRevision, PlantChangeSuggestion
from plantcare.plants.models import CareStep, CareStepType, HumidityPreference, LightType, Plant
from plantcare.spaces.models import Room, Zone

DEFAULT_SUGGESTED_FREQUENCY_DAYS = 7


def care_steps_from_recommendation(recommendation: AIPlantRecommendation) -> List[CareStep]:
    """Watering always; misting, dusting and rotation when a frequency is given."""
    steps = [
        CareStep(
            type=CareStepType.WATERING,
            instructions=recommendation.watering_instructions,
            frequency_days=recommendation.watering_frequency_days,
        )
    ]
    optional = [
        (CareStepType.MISTING, recommendation.misting_frequency_days,
         recommendation.misting_instructions, "Mist leaves regularly"),
        (CareStepType.DUSTING, recommendation.dusting_frequency_days,
         recommendation.dusting_instructions, "Dust leaves gently"),
        (CareStepType.ROTATION, recommendation.rotation_frequency_days,
         recommendation.rotation_instructions, "Rotate plant for even growth"),
    ]
    for step_type, frequency, instructions, default_instructions in optional:
        if frequency is not None:
            steps.append(
                CareStep(
                    type=step_type,
                    instructions=instructions or default_instructions,
                    frequency_days=frequency,
                )
            )
    return steps


def resolve_recommended_spaces(
    names: Iterable[str], rooms: Sequence[Room], zones: Sequence[Zone]
) -> List[UUID]:
    """Ids of the recommended spaces that exist, rooms winning name clashes."""
    ids = []
    for name in names:
        room = next((r for r in rooms if r.name == name), None)
        if room is not None:
            ids.append(room.id)
            continue
        zone = next((z for z in zones if z.name == name), None)
        if zone is not None:
            ids.append(zone.id)
    return ids


def apply_change_suggestion(
    plant: Plant,
    suggestion: PlantChangeSuggestion,
    rooms: Sequence[Room],
    zones: Sequence[Zone],
    selected: Optional[Set[str]] = None,
) -> Plant:
    """
    Return a copy of ``plant`` with the selected suggested changes applied.

    A suggested space is matched by name: a room first (its only window is
    picked automatically), else a zone. Unknown space names are ignored.
    Suggested care steps update the first existing step of the same type or
    are appended as new steps.
    """
    selected = set(suggestion.change_keys()) if selected is None else set(selected)
    updated = plant.model_copy(deep=True)

    if "name" in selected and suggestion.name is not None:
        updated.name = suggestion.name

    if "space" in selected and suggestion.suggested_space is not None:
        room = next((r for r in rooms if r.name == suggestion.suggested_space), None)
        zone = next((z for z in zones if z.name == suggestion.suggested_space), None)
        if room is not None:
            window_id = room.windows[0].id if len(room.windows) == 1 else None
            updated.assign_to_room(room.id, window_id)
        elif zone is not None:
            updated.assign_to_zone(zone.id)

    if "light_type" in selected and suggestion.light_type is not None:
        updated.light_type = suggestion.light_type
    if "light_direction" in selected and suggestion.preferred_light_direction is not None:
        updated.preferred_light_direction = suggestion.preferred_light_direction
    if "humidity" in selected and suggestion.humidity_preference is not None:
        updated.humidity_preference = suggestion.humidity_preference
    if "notes" in selected and suggestion.general_notes is not None:
        updated.general_notes = suggestion.general_notes

    if "care_steps" in selected and suggestion.care_steps:
        for care in suggestion.care_steps:
            existing = next((s for s in updated.care_steps if s.type == care.type), None)
            if existing is None:
                updated.add_care_step(
                    CareStep(
                        type=care.type,
                        custom_name=care.custom_name if care.type == CareStepType.CUSTOM else None,
                        instructions=care.instructions or "",
                        frequency_days=(
                            care.frequency_days
                            if care.frequency_days is not None
                            else DEFAULT_SUGGESTED_FREQUENCY_DAYS
                        ),
                    )
                )
                continue
            if care.instructions is not None:
                existing.instructions = care.instructions
            if care.frequency_days is not None:
                existing.frequency_days = care.frequency_days
            if care.type == CareStepType.CUSTOM and care.custom_name is not None:
                existing.custom_name = care.custom_name

    return updated


_REVISION_STEP_TYPES = {
    "watering": CareStepType.WATERING,
    "misting": CareStepType.MISTING,
    "dusting": CareStepType.DUSTING,
    "rotation": CareStepType.ROTATION,
}


def _apply_revision(plant: Plant, revision: PlantCareRevision) -> bool:
    field = revision.field
    value = revision.suggested_value.strip()

    if field == "lightType":
        plant.light_type = LightType(value)
        return True
    if field == "humidityPreference":
        plant.humidity_preference = HumidityPreference(value)
        return True

    if field.startswith("remove"):
        step_type = _REVISION_STEP_TYPES.get(field[len("remove"):].lower())
        if step_type is None or step_type == CareStepType.WATERING:
            return False
        before = len(plant.care_steps)
        plant.care_steps = [s for s in plant.care_steps if s.type != step_type]
        return len(plant.care_steps) != before

    for prefix, step_type in _REVISION_STEP_TYPES.items():
        if field in (f"{prefix}FrequencyDays", f"{prefix}Instructions"):
            step = next((s for s in plant.care_steps if s.type == step_type), None)
            if step is None:
                return False
            if field.endswith("FrequencyDays"):
                step.frequency_days = int(value)
            else:
                step.instructions = value
            return True
    return False


def apply_care_revisions(
    plants: Sequence[Plant], revisions: Iterable[PlantCareRevision]
) -> List[Plant]:
    """
    Apply accepted care-review revisions; returns copies of the changed plants.

    Revisions for unknown plants, unknown fields or steps the plant does not
    have are skipped. Watering can be retuned but never removed. A value that
    does not parse (a non-numeric frequency, an unknown light type) raises
    ``ValueError`` and nothing is returned.
    """
    by_id = {str(p.id): p.model_copy(deep=True) for p in plants}
    changed: Dict[str, Plant] = {}
    for revision in revisions:
        plant = by_id.get(revision.plant_id.strip().lower())
        if plant is None:
            continue
        if _apply_revision(plant, revision):
            changed[str(plant.id)] = plant
    return list(changed.values())
