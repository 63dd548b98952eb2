"""Genre style prompts sent with lyrics when the user gives no prompt."""

from typing import Literal, Optional

Genre = Literal["rap", "rock", "country"]

DEFAULT_GENRE: Genre = "rap"

GENRE_PROMPTS: dict[str, str] = {
    "rap": "hip-hop, rap, urban, strong beat, rhythmic, modern, male vocal",
    "rock": "rock, alternative, electric guitar, powerful drums, energetic, anthemic, male vocal",
    "country": "country, acoustic guitar, storytelling, heartfelt, melodic, warm, male vocal",
}


def resolve_prompt(prompt: Optional[str] = None, genre: Optional[str] = None) -> str:
    """Return the explicit prompt if non-blank, else the genre's style prompt.

    Raises:
        ValueError: If genre is not one of rap, rock, country
    """
    if prompt and prompt.strip():
        return prompt.strip()
    genre = genre or DEFAULT_GENRE
    try:
        return GENRE_PROMPTS[genre]
    except KeyError:
        raise ValueError(f"Unknown genre: {genre}")
