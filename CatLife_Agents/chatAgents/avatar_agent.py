# avatar_agent.py
import os
import logging
from typing import Optional
from openai import OpenAI

#custom imports
from CatLife_Agents.states.catState import CatProfile, PhotoAnalysis
from CatLife_Agents.chatAgents.prompts import avatar_generation_prompt
from CatLife_Agents.helperFunctions.agent_helper_function import has_openai_key

logger = logging.getLogger(__name__)

AVATAR_IMAGE_MODEL = os.getenv("AVATAR_IMAGE_MODEL", "dall-e-3")
AVATAR_SIZE = "1024x1024"


def build_avatar_prompt(profile: CatProfile, analysis: Optional[PhotoAnalysis] = None) -> str:
    color = (analysis.estimated_color if analysis else None) or "orange"
    pattern = (analysis.estimated_pattern if analysis else None) or "tabby"
    return avatar_generation_prompt(color, pattern, profile.display_name())


def generate_avatar(profile: CatProfile, analysis: Optional[PhotoAnalysis] = None) -> Optional[str]:
    """Pixel-art avatar URL, or None when the image API is unavailable."""
    if not has_openai_key():
        return None
    try:
        client = OpenAI()
        resp = client.images.generate(
            model=AVATAR_IMAGE_MODEL,
            prompt=build_avatar_prompt(profile, analysis),
            n=1,
            size=AVATAR_SIZE,
        )
        return resp.data[0].url if resp.data else None
    except Exception as e:
        logger.warning("avatar generation failed: %s", e)
        return None
