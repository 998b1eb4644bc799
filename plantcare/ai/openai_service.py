"""OpenAI service for plant identification, care recommendations, questions and health checks."""

import json
import logging
import re
from datetime import datetime, tzinfo
from typing import Optional, List, Sequence

from openai import AsyncOpenAI
from pydantic import ValidationError

from plantcare.ai.models import (
    AIPlantQuestionResponse,
    AIPlantRecommendation,
    PlantCareVibeCheckResponse,
    PlantHealthCheckReply,
    SpacePlacementPreference,
)
from plantcare.core.config import get_settings
from plantcare.core.exceptions import AIServiceError
from plantcare.plants.models import Plant
from plantcare.spaces.models import Room, Zone
from plantcare.spaces.resolver import SpaceResolver

logger = logging.getLogger(__name__)


RECOMMENDATION_SYSTEM_PROMPT = """You are a plant care expert assistant. Your role is to provide detailed care recommendations for plants based on their species and the user's home layout including both indoor and outdoor spaces.

You must respond with ONLY a valid JSON object. Do not include any other text, markdown formatting, or explanations. Just return the raw JSON matching this exact structure:
{
    "name": "Plant Name",
    "latinName": "Scientific name in Latin (optional)",
    "lightType": "Direct" | "Indirect" | "Low",
    "preferredLightDirection": "North" | "Northeast" | "East" | "Southeast" | "South" | "Southwest" | "West" | "Northwest",
    "humidityPreference": "Low" | "Medium" | "High",
    "wateringInstructions": "Detailed watering instructions",
    "wateringFrequencyDays": number,
    "mistingInstructions": "Misting instructions (optional)",
    "mistingFrequencyDays": number (optional),
    "dustingInstructions": "Dusting instructions (optional)",
    "dustingFrequencyDays": number (optional),
    "rotationInstructions": "Rotation instructions (optional)",
    "rotationFrequencyDays": number (optional),
    "generalNotes": "General care notes and tips",
    "recommendedSpaces": ["First choice space name", "Second choice space name"],
    "recommendedSpaceTypes": ["indoor" | "outdoor", "indoor" | "outdoor"]
}

Base indoor recommendations on light needs vs window directions, humidity needs and temperature.
Base outdoor recommendations on hardiness, sun exposure (aspect, sun period, sun hours) and wind tolerance.
If a plant is not suitable outdoors, recommend only indoor spaces even if outdoor was preferred.
Provide at least 2 space recommendations ordered by suitability.
Remember: Return ONLY the JSON object, no other text."""


QUESTION_SYSTEM_PROMPT = """You are a plant care expert assistant. You are being asked a question about a specific plant and its care. If an image is provided, analyze it thoroughly to provide more accurate advice.

You must respond with ONLY a valid JSON object matching this exact structure:
{
    "answer": "Your brief, helpful answer to the user's question",
    "suggestedChanges": {
        "name": "New name (only if changing)",
        "assignedRoomID": "Space name (only if suggesting a different room or zone)",
        "lightType": "Direct" | "Indirect" | "Low" (only if changing),
        "preferredLightDirection": "North" | "Northeast" | "East" | "Southeast" | "South" | "Southwest" | "West" | "Northwest" (only if changing),
        "humidityPreference": "Low" | "Medium" | "High" (only if changing),
        "generalNotes": "Updated notes (only if changing)",
        "careSteps": [
            {
                "type": "Watering" | "Misting" | "Dusting" | "Rotation" | "Custom",
                "customName": "Custom name if type is Custom",
                "instructions": "Updated instructions",
                "frequencyDays": number
            }
        ]
    }
}

IMPORTANT RULES:
1. Keep your answer brief and to the point (2-3 sentences max)
2. Only include fields in suggestedChanges if you are actually suggesting a change
3. If no changes are suggested, set suggestedChanges to null
4. For assignedRoomID, use the space NAME (not an ID)
5. Only suggest changes that directly relate to the user's question"""

IDENTIFY_SYSTEM_PROMPT = """You are a plant identification expert. Analyze the provided image and identify the plant species.
Return ONLY the common name and Latin name of the plant in this exact format:
Common Name (Latin name)

For example:
Monstera Deliciosa (Monstera deliciosa)
Snake Plant (Sansevieria trifasciata)

If you cannot identify the plant with certainty, return "Unknown Plant".
Do not include any other text, explanations, or formatting."""

UNKNOWN_PLANT = "Unknown Plant"


HEALTH_CHECK_SYSTEM_PROMPT = """You are a plant health expert. You are given recent photos of one plant (newest first) together with its care schedule and placement.

Look for signs of stress: yellowing or browning leaves, drooping, leggy growth, pests, root or stem rot, sunburn, and compare the photos for changes over time.

You must respond with ONLY a valid JSON object matching this exact structure:
{
    "feedback": "2-4 sentences: how the plant looks, the most likely cause of any problem, and one concrete thing to change"
}

If the plant looks healthy, say so and mention what to keep doing."""


VIBE_CHECK_SYSTEM_PROMPT = """You are a plant care expert reviewing a whole plant collection. Check every plant's care schedule against its species, light, humidity and placement, and flag schedules that look wrong.

You must respond with ONLY a valid JSON object matching this exact structure:
{
    "overall": "2-3 sentences on how the collection's care looks overall",
    "suggestions": [
        {
            "plantId": "The plant's id exactly as given",
            "plantName": "The plant's name",
            "field": "wateringFrequencyDays" | "wateringInstructions" | "mistingFrequencyDays" | "mistingInstructions" | "dustingFrequencyDays" | "dustingInstructions" | "rotationFrequencyDays" | "rotationInstructions" | "removeMisting" | "removeDusting" | "removeRotation" | "lightType" | "humidityPreference",
            "currentValue": "The current value as text",
            "suggestedValue": "The new value as text (a whole number for frequencies, Direct/Indirect/Low for lightType, Low/Medium/High for humidityPreference)",
            "reason": "One short sentence"
        }
    ]
}

Only suggest changes you are confident about. Return an empty suggestions list if every schedule looks right."""


def spaces_context(rooms: Sequence[Room], zones: Sequence[Zone]) -> List[dict]:
    """Describe the user's spaces for a prompt."""
    rooms_info = [
        {
            "name": room.name,
            "type": "indoor",
            "windows": [{"direction": w.direction.value} for w in room.windows],
        }
        for room in rooms
    ]
    zones_info = [
        {
            "name": zone.name,
            "type": "outdoor",
            "aspect": zone.aspect.value,
            "sunPeriod": zone.sun_period.value,
            "wind": zone.wind.value,
            "sunHours": zone.inferred_sun_hours.value,
        }
        for zone in zones
    ]
    return rooms_info + zones_info


def plant_context(
    plant: Plant,
    rooms: Sequence[Room],
    zones: Sequence[Zone],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> dict:
    """Describe a plant, its placement and its care state for a prompt."""
    resolver = SpaceResolver(rooms, zones, [plant])
    room = resolver.room_for_plant(plant)
    zone = resolver.zone_for_plant(plant)
    window = resolver.window_for_plant(plant)

    if room is not None:
        location, location_type = room.name, "indoor"
    elif zone is not None:
        location, location_type = zone.name, "outdoor"
    else:
        location, location_type = "Not assigned", "none"

    return {
        "name": plant.name,
        "currentLocation": location,
        "currentLocationType": location_type,
        "currentWindow": window.direction.value if window else "Not assigned to window",
        "lightType": plant.light_type.value,
        "preferredLightDirection": plant.preferred_light_direction.value,
        "humidityPreference": plant.humidity_preference.value if plant.humidity_preference else "Not specified",
        "generalNotes": plant.general_notes,
        "careSteps": [
            {
                "type": step.type.value,
                "displayName": step.display_name,
                "instructions": step.instructions,
                "frequencyDays": step.frequency_days,
                "isEnabled": step.is_enabled,
                "isOverdue": step.is_overdue(now, tz),
                "daysUntilDue": step.days_until_due(now, tz),
                "lastCompleted": step.last_completed_date.isoformat() if step.last_completed_date else "Never",
            }
            for step in plant.care_steps
        ],
    }


def image_part(photo_base64: str, detail: str = "high") -> dict:
    """Chat message content part for a base64 JPEG."""
    return {
        "type": "image_url",
        "image_url": {"url": f"data:image/jpeg;base64,{photo_base64}", "detail": detail},
    }


def extract_json_object(content: str) -> dict:
    """Parse the JSON object in a model reply, tolerating code fences and chatter."""
    content = content.strip()

    json_match = re.search(r'```(?:json)?\s*([\s\S]*?)\s*```', content)
    if json_match:
        content = json_match.group(1).strip()

    start = content.find("{")
    end = content.rfind("}")
    if start != -1 and end > start:
        content = content[start:end + 1]

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise AIServiceError(f"Failed to parse AI response as JSON: {e}. Response: {content[:200]}")
    if not isinstance(data, dict):
        raise AIServiceError("AI response was not a JSON object")
    return data


class OpenAIService:
    """Handles OpenAI API interactions for plant care."""

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: Optional[str] = None):
        settings = get_settings()
        self._client = client
        self.model = model or settings.OPENAI_MODEL

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            api_key = get_settings().OPENAI_API_KEY
            if not api_key:
                raise AIServiceError(
                    "OpenAI API key is missing. Please set OPENAI_API_KEY in your environment."
                )
            self._client = AsyncOpenAI(api_key=api_key)
        return self._client

    async def _complete(self, messages: List[dict], temperature: float) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=1000,
                temperature=temperature,
            )
        except AIServiceError:
            raise
        except Exception as e:
            error_msg = str(e)
            logger.error(f"OpenAI request failed: {error_msg}")
            if "api key" in error_msg.lower() or "authentication" in error_msg.lower():
                raise AIServiceError("OpenAI API key is missing or invalid. Please set OPENAI_API_KEY in your environment.")
            raise AIServiceError(f"OpenAI API error: {error_msg}")

        if not response.choices or not response.choices[0].message.content:
            raise AIServiceError("OpenAI returned an empty response")
        return response.choices[0].message.content

    async def generate_plant_recommendation(
        self,
        plant_name: str,
        rooms: Sequence[Room],
        zones: Sequence[Zone],
        preference: SpacePlacementPreference = SpacePlacementPreference.NO_PREFERENCE,
    ) -> AIPlantRecommendation:
        """Care instructions and best spaces for a plant the user is adding."""
        spaces_json = json.dumps(spaces_context(rooms, zones), indent=2)
        user_prompt = f"""I have a {plant_name} and need care recommendations.

My placement preference is: {preference.value}

My home has the following spaces:
{spaces_json}

Please provide complete care instructions and recommend the best spaces for this plant based on its needs, my preference, and my available spaces."""

        content = await self._complete(
            [
                {"role": "system", "content": RECOMMENDATION_SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            temperature=0.7,
        )
        data = extract_json_object(content)
        try:
            return AIPlantRecommendation.model_validate(data)
        except ValidationError as e:
            raise AIServiceError(f"AI recommendation did not match the expected format: {e}")

    async def ask_plant_question(
        self,
        question: str,
        plant: Plant,
        rooms: Sequence[Room],
        zones: Sequence[Zone],
        photo_base64: Optional[str] = None,
        tz: Optional[tzinfo] = None,
    ) -> AIPlantQuestionResponse:
        """Free-text answer plus optional structured changes for the plant."""
        plant_json = json.dumps(plant_context(plant, rooms, zones, tz=tz), indent=2)
        spaces_json = json.dumps(spaces_context(rooms, zones), indent=2)
        text = f"""Here is my plant:
{plant_json}

My available spaces:
{spaces_json}

My question: {question}"""

        if photo_base64:
            user_content = [{"type": "text", "text": text}, image_part(photo_base64)]
        else:
            user_content = text

        content = await self._complete(
            [
                {"role": "system", "content": QUESTION_SYSTEM_PROMPT},
                {"role": "user", "content": user_content},
            ],
            temperature=0.7,
        )
        data = extract_json_object(content)
        try:
            return AIPlantQuestionResponse.model_validate(data)
        except ValidationError as e:
            raise AIServiceError(f"AI answer did not match the expected format: {e}")

    async def identify_plant(self, photo_base64: str) -> str:
        """
        Name the plant in a photo as ``Common Name (Latin name)``.

        Returns ``UNKNOWN_PLANT`` when the model cannot identify it.
        """
        content = await self._complete(
            [
                {"role": "system", "content": IDENTIFY_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": "Please identify this plant:"},
                        image_part(photo_base64),
                    ],
                },
            ],
            temperature=0.3,
        )
        name = content.strip().strip('"').strip()
        logger.info(f"Identified plant: {name}")
        return name or UNKNOWN_PLANT

    async def perform_plant_health_check(
        self,
        plant: Plant,
        photos_base64: Sequence[str],
        rooms: Sequence[Room],
        zones: Sequence[Zone],
        tz: Optional[tzinfo] = None,
    ) -> PlantHealthCheckReply:
        """Short health feedback for a plant from up to three recent photos."""
        plant_json = json.dumps(plant_context(plant, rooms, zones, tz=tz), indent=2)
        user_content = [
            {"type": "text", "text": f"Here is my plant:\n{plant_json}\n\nHow healthy does it look?"}
        ]
        user_content.extend(image_part(photo) for photo in photos_base64[:3])

        content = await self._complete(
            [
                {"role": "system", "content": HEALTH_CHECK_SYSTEM_PROMPT},
                {"role": "user", "content": user_content},
            ],
            temperature=0.5,
        )
        data = extract_json_object(content)
        try:
            return PlantHealthCheckReply.model_validate(data)
        except ValidationError as e:
            raise AIServiceError(f"AI health check did not match the expected format: {e}")

    async def perform_plant_care_vibe_check(
        self,
        plants: Sequence[Plant],
        rooms: Sequence[Room],
        zones: Sequence[Zone],
        tz: Optional[tzinfo] = None,
    ) -> PlantCareVibeCheckResponse:
        """Review every plant's care schedule and propose field-level revisions."""
        collection = [
            {"id": str(plant.id), **plant_context(plant, rooms, zones, tz=tz)}
            for plant in plants
        ]
        user_prompt = f"""Here are all my plants:
{json.dumps(collection, indent=2)}

My available spaces:
{json.dumps(spaces_context(rooms, zones), indent=2)}

Does my care routine look right?"""

        content = await self._complete(
            [
                {"role": "system", "content": VIBE_CHECK_SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            temperature=0.5,
        )
        data = extract_json_object(content)
        try:
            return PlantCareVibeCheckResponse.model_validate(data)
        except ValidationError as e:
            raise AIServiceError(f"AI care review did not match the expected format: {e}")
