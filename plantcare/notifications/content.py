"""
Notification Content Templates

Copy for the daily plant care reminder. Centralizing content here allows easy
modification of notification text without changing business logic.
"""

from typing import List, Tuple

from plantcare.plants.models import CareStep, Plant


class CareReminderContent:
    """Daily care reminder notification content templates."""

    TITLE = "Plant Care Reminder"

    @staticmethod
    def single_step(plant_name: str, step_name: str) -> str:
        return f"{plant_name} needs {step_name.lower()}"

    @staticmethod
    def single_plant(plant_name: str, step_count: int) -> str:
        return f"{plant_name} has {step_count} overdue care steps"

    @staticmethod
    def multiple_plants(plant_count: int, step_count: int) -> str:
        return f"{plant_count} plants need care ({step_count} overdue steps)"

    @classmethod
    def body(cls, overdue: List[Tuple[Plant, CareStep]]) -> str:
        """
        Pick the message for a non-empty list of overdue (plant, step) pairs.

        Args:
            overdue: Overdue steps with their plants, most relevant first.

        Returns:
            Formatted message string.
        """
        if len(overdue) == 1:
            plant, step = overdue[0]
            return cls.single_step(plant.name, step.display_name)

        plant_count = len({plant.id for plant, _ in overdue})
        if plant_count == 1:
            return cls.single_plant(overdue[0][0].name, len(overdue))
        return cls.multiple_plants(plant_count, len(overdue))
