"""PlantCare - care scheduling service for houseplants and outdoor plantings."""

__version__ = "0.1.0"
