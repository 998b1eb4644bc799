"""
tests/test_ai.py - Tests for the AI collaborator and its consumers.

Tests cover:
- JSON extraction from model replies
- Recommendation and question parsing through a stubbed OpenAI client
- Care steps built from a recommendation
- Applying suggested changes to a plant
- Identification, health checks and the care review
"""

import json
from types import SimpleNamespace

import pytest

from plantcare.ai.models import AIPlantRecommendation, PlantCareRevision, PlantChangeSuggestion
from plantcare.ai.openai_service import OpenAIService, extract_json_object
from plantcare.ai.suggestions import (
    apply_care_revisions,
    apply_change_suggestion,
    care_steps_from_recommendation,
    resolve_recommended_spaces,
)
from plantcare.core.exceptions import AIServiceError
from plantcare.plants.models import CareStep, CareStepType, HumidityPreference, LightType, Plant
from plantcare.spaces.models import Room, Window, Zone
from tests.conftest import NOW, watering


RECOMMENDATION = {
    "name": "Boston Fern",
    "latinName": "Nephrolepis exaltata",
    "lightType": "Indirect",
    "preferredLightDirection": "North",
    "humidityPreference": "High",
    "wateringInstructions": "Keep soil moist",
    "wateringFrequencyDays": 3,
    "mistingInstructions": None,
    "mistingFrequencyDays": 2,
    "rotationFrequencyDays": 14,
    "generalNotes": "Likes bathrooms",
    "recommendedSpaces": ["Bathroom", "Patio", "Attic"],
    "recommendedSpaceTypes": ["indoor", "outdoor", "indoor"],
}


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(content=None, error=None):
    completions = FakeCompletions(content, error)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def test_extract_json_from_fenced_reply():
    reply = "Sure! Here you go:\n```json\n{\"answer\": \"Water less\"}\n```"
    assert extract_json_object(reply) == {"answer": "Water less"}


def test_extract_json_with_surrounding_text():
    assert extract_json_object('Result: {"a": 1} thanks') == {"a": 1}


def test_extract_json_rejects_garbage():
    with pytest.raises(AIServiceError):
        extract_json_object("no json here")


async def test_generate_recommendation():
    client, completions = fake_client(json.dumps(RECOMMENDATION))
    service = OpenAIService(client=client, model="test-model")
    rooms = [Room(name="Bathroom", windows=[Window(direction="North")])]

    recommendation = await service.generate_plant_recommendation("fern", rooms, [Zone(name="Patio")])

    assert recommendation.latin_name == "Nephrolepis exaltata"
    assert recommendation.watering_frequency_days == 3
    assert completions.calls[0]["model"] == "test-model"
    assert "Bathroom" in completions.calls[0]["messages"][1]["content"]


async def test_invalid_recommendation_raises():
    client, _ = fake_client(json.dumps({"name": "Fern"}))
    with pytest.raises(AIServiceError):
        await OpenAIService(client=client).generate_plant_recommendation("fern", [], [])


async def test_client_errors_become_service_errors():
    client, _ = fake_client(error=RuntimeError("connection reset"))
    with pytest.raises(AIServiceError) as exc_info:
        await OpenAIService(client=client).generate_plant_recommendation("fern", [], [])
    assert "connection reset" in exc_info.value.detail


async def test_empty_reply_raises():
    client, _ = fake_client("")
    with pytest.raises(AIServiceError):
        await OpenAIService(client=client).ask_plant_question("Why?", Plant(name="Fern"), [], [])


async def test_ask_question_with_photo():
    reply = {
        "answer": "Move it somewhere brighter.",
        "suggestedChanges": {"assignedRoomID": "Sunroom", "lightType": "Direct"},
    }
    client, completions = fake_client(json.dumps(reply))
    plant = Plant(name="Fern", care_steps=[watering(last_completed=NOW)])

    response = await OpenAIService(client=client).ask_plant_question(
        "Why are the leaves pale?", plant, [], [], photo_base64="abc123"
    )

    assert response.answer == "Move it somewhere brighter."
    assert response.suggested_changes.suggested_space == "Sunroom"
    assert response.suggested_changes.change_keys() == ["space", "light_type"]
    user_content = completions.calls[0]["messages"][1]["content"]
    assert user_content[1]["image_url"]["url"] == "data:image/jpeg;base64,abc123"


def test_care_steps_from_recommendation():
    recommendation = AIPlantRecommendation.model_validate(RECOMMENDATION)
    steps = care_steps_from_recommendation(recommendation)

    assert [s.type for s in steps] == [CareStepType.WATERING, CareStepType.MISTING, CareStepType.ROTATION]
    assert steps[0].instructions == "Keep soil moist"
    assert steps[1].instructions == "Mist leaves regularly"
    assert steps[2].frequency_days == 14


def test_resolve_recommended_spaces():
    bathroom, patio = Room(name="Bathroom"), Zone(name="Patio")
    ids = resolve_recommended_spaces(["Bathroom", "Patio", "Attic"], [bathroom], [patio])
    assert ids == [bathroom.id, patio.id]


def test_apply_suggestion_moves_to_room_with_single_window():
    window = Window(direction="South")
    sunroom = Room(name="Sunroom", windows=[window])
    plant = Plant(name="Fern", care_steps=[watering()])
    suggestion = PlantChangeSuggestion.model_validate({"assignedRoomID": "Sunroom", "lightType": "Direct"})

    updated = apply_change_suggestion(plant, suggestion, [sunroom], [])

    assert updated.assigned_room_id == sunroom.id
    assert updated.assigned_window_id == window.id
    assert updated.light_type == LightType.DIRECT
    assert plant.assigned_room_id is None


def test_apply_suggestion_moves_to_zone():
    room = Room(name="Kitchen")
    patio = Zone(name="Patio")
    plant = Plant(name="Basil", assigned_room_id=room.id)
    suggestion = PlantChangeSuggestion(suggested_space="Patio")

    updated = apply_change_suggestion(plant, suggestion, [room], [patio])

    assert updated.assigned_zone_id == patio.id
    assert updated.assigned_room_id is None


def test_apply_suggestion_respects_selection():
    plant = Plant(name="Fern")
    suggestion = PlantChangeSuggestion(name="Boston Fern", general_notes="Keep humid")

    updated = apply_change_suggestion(plant, suggestion, [], [], selected={"notes"})

    assert updated.name == "Fern"
    assert updated.general_notes == "Keep humid"


def test_apply_suggestion_updates_and_appends_care_steps():
    existing = watering(frequency_days=7)
    plant = Plant(name="Fern", care_steps=[existing])
    suggestion = PlantChangeSuggestion.model_validate(
        {
            "careSteps": [
                {"type": "Watering", "frequencyDays": 4, "instructions": "Water more often"},
                {"type": "Misting"},
            ]
        }
    )

    updated = apply_change_suggestion(plant, suggestion, [], [])

    watering_step = updated.get_care_step(existing.id)
    assert watering_step.frequency_days == 4
    assert watering_step.instructions == "Water more often"
    misting = updated.care_steps[1]
    assert misting.type == CareStepType.MISTING
    assert misting.frequency_days == 7
    assert plant.care_steps[0].frequency_days == 7


def test_apply_suggestion_rejects_bad_frequency():
    plant = Plant(name="Fern", care_steps=[watering()])
    suggestion = PlantChangeSuggestion.model_validate({"careSteps": [{"type": "Watering", "frequencyDays": 0}]})
    with pytest.raises(ValueError):
        apply_change_suggestion(plant, suggestion, [], [])


def test_custom_step_suggestion_keeps_name():
    plant = Plant(name="Rose")
    suggestion = PlantChangeSuggestion.model_validate(
        {"careSteps": [{"type": "Custom", "customName": "Deadhead", "frequencyDays": 5}]}
    )
    updated = apply_change_suggestion(plant, suggestion, [], [])
    assert updated.care_steps[0].display_name == "Deadhead"
    assert isinstance(updated.care_steps[0], CareStep)


async def test_identify_plant_sends_photo_and_trims_reply():
    client, completions = fake_client("  Snake Plant (Sansevieria trifasciata)\n")

    name = await OpenAIService(client=client).identify_plant("cGhvdG8=")

    assert name == "Snake Plant (Sansevieria trifasciata)"
    call = completions.calls[0]
    assert call["temperature"] == 0.3
    assert call["messages"][1]["content"][1]["image_url"]["url"] == "data:image/jpeg;base64,cGhvdG8="


async def test_health_check_caps_photos_at_three():
    client, completions = fake_client(json.dumps({"feedback": "Looks thirsty; water sooner."}))
    plant = Plant(name="Fern", care_steps=[watering(last_completed=NOW)])

    reply = await OpenAIService(client=client).perform_plant_health_check(
        plant, ["a", "b", "c", "d"], [], []
    )

    assert reply.feedback == "Looks thirsty; water sooner."
    user_content = completions.calls[0]["messages"][1]["content"]
    assert [part["type"] for part in user_content] == ["text", "image_url", "image_url", "image_url"]
    assert '"name": "Fern"' in user_content[0]["text"]


async def test_health_check_without_feedback_raises():
    client, _ = fake_client(json.dumps({"status": "ok"}))
    with pytest.raises(AIServiceError):
        await OpenAIService(client=client).perform_plant_health_check(Plant(name="Fern"), ["a"], [], [])


async def test_vibe_check_lists_plant_ids():
    plant = Plant(name="Fern", care_steps=[watering()])
    reply = {
        "overall": "Mostly fine.",
        "suggestions": [
            {
                "plantId": str(plant.id),
                "plantName": "Fern",
                "field": "wateringFrequencyDays",
                "currentValue": "7",
                "suggestedValue": "4",
                "reason": "Ferns like moist soil",
            }
        ],
    }
    client, completions = fake_client(json.dumps(reply))

    response = await OpenAIService(client=client).perform_plant_care_vibe_check([plant], [], [])

    assert response.overall == "Mostly fine."
    assert response.suggestions[0].suggested_value == "4"
    assert str(plant.id) in completions.calls[0]["messages"][1]["content"]


def _revision(plant, field, value):
    return PlantCareRevision(plant_id=str(plant.id), field=field, suggested_value=value)


def test_apply_care_revisions_updates_steps_and_fields():
    fern = Plant(
        name="Fern",
        care_steps=[watering(), CareStep(type=CareStepType.MISTING, frequency_days=2)],
    )
    cactus = Plant(name="Cactus", care_steps=[watering(frequency_days=21)])

    changed = apply_care_revisions(
        [fern, cactus],
        [
            _revision(fern, "wateringFrequencyDays", "4"),
            _revision(fern, "wateringInstructions", "Keep moist"),
            _revision(fern, "humidityPreference", "High"),
            _revision(fern, "removeMisting", ""),
            _revision(cactus, "dustingFrequencyDays", "30"),
            _revision(cactus, "removeWatering", ""),
            PlantCareRevision(plant_id="not-a-plant", field="lightType", suggested_value="Low"),
        ],
    )

    assert [p.name for p in changed] == ["Fern"]
    updated = changed[0]
    assert [s.type for s in updated.care_steps] == [CareStepType.WATERING]
    assert updated.care_steps[0].frequency_days == 4
    assert updated.care_steps[0].instructions == "Keep moist"
    assert updated.humidity_preference == HumidityPreference.HIGH
    assert fern.care_steps[0].frequency_days == 7


def test_apply_care_revisions_rejects_bad_values():
    fern = Plant(name="Fern", care_steps=[watering()])
    with pytest.raises(ValueError):
        apply_care_revisions([fern], [_revision(fern, "wateringFrequencyDays", "often")])
    with pytest.raises(ValueError):
        apply_care_revisions([fern], [_revision(fern, "wateringFrequencyDays", "0")])
    with pytest.raises(ValueError):
        apply_care_revisions([fern], [_revision(fern, "lightType", "Bright")])
