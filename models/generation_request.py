from pydantic import AliasChoices, BaseModel, Field, field_validator
from typing import Optional


class GenerationRequest(BaseModel):
    """Normalized generation request handed to provider adapters.

    Range checks live in services.validation so that failures carry the
    human-readable messages clients rely on; this model only fixes types.
    """
    provider: Optional[str] = None
    model: Optional[str] = None
    prompt: Optional[str] = None
    negative_prompt: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("negativePrompt", "negative_prompt"),
    )
    width: int = 1024
    height: int = 1024
    steps: int = Field(default=9, validation_alias=AliasChoices("steps", "num_inference_steps"))
    seed: Optional[int] = None
    guidance_scale: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("guidanceScale", "guidance_scale"),
    )
    auth_token: Optional[str] = Field(default=None, exclude=True)

    @field_validator("seed", mode="before")
    @classmethod
    def seed_is_not_bool(cls, value):
        # bool is an int subclass
        if isinstance(value, bool):
            raise ValueError("seed must be an integer")
        return value

    model_config = {
        "protected_namespaces": (),
        "json_schema_extra": {
            "example": {
                "provider": "huggingface",
                "model": "z-image-turbo",
                "prompt": "A beautiful sunset over mountains",
                "width": 1024,
                "height": 1024,
                "steps": 9,
                "seed": 42
            }
        }
    }


class GenerationResponse(BaseModel):
    url: str
    seed: int
    duration: Optional[float] = None


class UpscaleRequest(BaseModel):
    url: str
    scale: int = 4


class UpscaleResponse(BaseModel):
    url: str
