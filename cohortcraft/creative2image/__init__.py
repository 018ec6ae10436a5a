"""
Creative to image generation.

This package turns creative image prompts into hosted image URLs through
interchangeable image generation providers.
"""

from cohortcraft.creative2image.adapters import get_image_adapter, ImageGenerationAdapter
from cohortcraft.creative2image.image_generator import ImageGenerator
