"""
Reciter data model.
"""

from pydantic import BaseModel, Field


class Reciter(BaseModel):
    """
    A reciter whose per-verse recordings are hosted on the audio CDN.

    Attributes:
        id: Reciter identifier (stable across releases, stored in preferences)
        name: Display name
        name_arabic: Native (Arabic) name
        style: Recitation style, e.g. 'murattal' or 'mujawwad'
        cdn_folder: Folder name of the reciter's files on the CDN
    """

    id: int = Field(
        ...,
        description="Reciter identifier",
        ge=1,
    )
    name: str = Field(
        ...,
        description="Display name",
        min_length=1,
    )
    name_arabic: str = Field(
        ...,
        description="Native (Arabic) name",
        min_length=1,
    )
    style: str = Field(
        default="murattal",
        description="Recitation style",
    )
    cdn_folder: str = Field(
        ...,
        description="CDN folder holding the reciter's SSSVVV.mp3 files",
        min_length=1,
    )

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"{self.name} ({self.name_arabic})"
