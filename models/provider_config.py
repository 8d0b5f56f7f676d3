"""Static provider and model catalog.

Hosted spaces take positional argument lists, so every model carries its own
payload builder and a ResultShape telling the adapter where the artifact URL,
the seed and (for video models) the duration sit in the result array.
"""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, List, Mapping, Optional, Tuple

from models.generation_request import GenerationRequest

MAX_SEED = 2147483647

# Hosted space base URLs
HF_SPACES = MappingProxyType({
    "z-image-turbo": "https://tongyi-mai-z-image-turbo.hf.space",
    "qwen-image-fast": "https://multimodalart-qwen-image-fast.hf.space",
    "ovis-image": "https://aidc-ai-ovis-image-7b.hf.space",
    "flux-1-schnell": "https://black-forest-labs-flux-1-schnell.hf.space",
    "upscaler": "https://tuan2308-upscaler.hf.space",
})
# Placeholder deployments for the quota-gated providers
GITEE_SPACE = "https://ai.gitee.com/spaces/z-image"
MODELSCOPE_SPACE = "https://modelscope-z-image.ms.show"


class ProviderKind(str, Enum):
    HOSTED_SPACE = "hosted_space"
    QUOTA_SPACE = "quota_space"


@dataclass(frozen=True)
class ResultShape:
    url_index: int = 0
    url_path: Tuple[str, ...] = ("url",)
    seed_index: Optional[int] = 1
    duration_index: Optional[int] = None


PayloadBuilder = Callable[[GenerationRequest, int], List[Any]]


@dataclass(frozen=True)
class ModelConfig:
    id: str
    name: str
    endpoint: str
    base_url: str
    build_payload: PayloadBuilder
    result_shape: ResultShape = field(default_factory=ResultShape)
    features: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ProviderConfig:
    id: str
    name: str
    kind: ProviderKind
    requires_auth: bool
    auth_header: str
    default_model: str
    models: Tuple[ModelConfig, ...]
    # Quota spaces expose one endpoint for every model
    endpoint: Optional[str] = None

    def model(self, model_id: Optional[str]) -> Optional[ModelConfig]:
        for model in self.models:
            if model.id == model_id:
                return model
        return None


# Positional payload builders, one per backend signature

def z_image_turbo_payload(r: GenerationRequest, seed: int) -> List[Any]:
    return [r.prompt, r.height, r.width, r.steps or 9, seed, False]


def qwen_image_fast_payload(r: GenerationRequest, seed: int) -> List[Any]:
    return [r.prompt, seed, True, "1:1", 3, r.steps or 8]


def ovis_image_payload(r: GenerationRequest, seed: int) -> List[Any]:
    return [r.prompt, r.height, r.width, seed, r.steps or 24, 4]


def flux_schnell_payload(r: GenerationRequest, seed: int) -> List[Any]:
    return [r.prompt, seed, False, r.width, r.height, r.steps or 8]


def gitee_payload(r: GenerationRequest, seed: int) -> List[Any]:
    return [
        r.model,
        r.prompt,
        r.negative_prompt or "",
        r.width,
        r.height,
        r.steps or 9,
        r.guidance_scale if r.guidance_scale is not None else 0.0,
        seed,
    ]


def modelscope_payload(r: GenerationRequest, seed: int) -> List[Any]:
    return [r.model, r.prompt, r.width, r.height, r.steps or 9, seed]


def upscale_payload(url: str, scale: int) -> List[Any]:
    return [
        {"path": url, "meta": {"_type": "gradio.FileData"}},
        "RealESRGAN_x4plus",
        0.5,
        False,
        scale,
    ]


# Gitee returns a gallery entry ({"image": {"url": ...}}), seed and duration
GITEE_RESULT = ResultShape(url_index=0, url_path=("image", "url"), seed_index=1, duration_index=2)
# ModelScope returns the URL as a bare string
MODELSCOPE_RESULT = ResultShape(url_index=0, url_path=(), seed_index=1)


@dataclass(frozen=True)
class UpscalerConfig:
    base_url: str
    endpoint: str
    allowed_scales: Tuple[int, ...] = (2, 4)
    default_scale: int = 4
    result_shape: ResultShape = field(default_factory=lambda: ResultShape(seed_index=None))


@dataclass(frozen=True)
class Catalog:
    providers: Mapping[str, ProviderConfig]
    upscaler: UpscalerConfig


def build_catalog() -> Catalog:
    """Build the immutable provider catalog. Called once at startup."""
    huggingface = ProviderConfig(
        id="huggingface",
        name="HuggingFace",
        kind=ProviderKind.HOSTED_SPACE,
        requires_auth=False,
        auth_header="X-HF-Token",
        default_model="z-image-turbo",
        models=(
            ModelConfig("z-image-turbo", "Z-Image Turbo", "generate_image",
                        HF_SPACES["z-image-turbo"], z_image_turbo_payload,
                        features=("seed", "dimensions", "steps")),
            ModelConfig("qwen-image-fast", "Qwen Image Fast", "generate_image",
                        HF_SPACES["qwen-image-fast"], qwen_image_fast_payload,
                        features=("seed", "steps")),
            ModelConfig("ovis-image", "Ovis Image", "generate",
                        HF_SPACES["ovis-image"], ovis_image_payload,
                        features=("seed", "dimensions", "steps")),
            ModelConfig("flux-1-schnell", "FLUX.1 Schnell", "infer",
                        HF_SPACES["flux-1-schnell"], flux_schnell_payload,
                        features=("seed", "dimensions", "steps")),
        ),
    )
    gitee = ProviderConfig(
        id="gitee",
        name="Gitee AI",
        kind=ProviderKind.QUOTA_SPACE,
        requires_auth=True,
        auth_header="X-API-Key",
        default_model="z-image-turbo",
        endpoint="generate",
        models=(
            ModelConfig("z-image-turbo", "Z-Image Turbo", "generate", GITEE_SPACE, gitee_payload,
                        result_shape=GITEE_RESULT,
                        features=("seed", "dimensions", "steps", "negative_prompt", "guidance")),
            ModelConfig("qwen-image", "Qwen Image", "generate", GITEE_SPACE, gitee_payload,
                        result_shape=GITEE_RESULT,
                        features=("seed", "dimensions", "steps", "negative_prompt", "guidance")),
        ),
    )
    modelscope = ProviderConfig(
        id="modelscope",
        name="ModelScope",
        kind=ProviderKind.QUOTA_SPACE,
        requires_auth=True,
        auth_header="X-MS-Token",
        default_model="z-image-turbo",
        endpoint="generate",
        models=(
            ModelConfig("z-image-turbo", "Z-Image Turbo", "generate", MODELSCOPE_SPACE, modelscope_payload,
                        result_shape=MODELSCOPE_RESULT,
                        features=("seed", "dimensions", "steps")),
            ModelConfig("flux-1-krea", "FLUX.1 Krea", "generate", MODELSCOPE_SPACE, modelscope_payload,
                        result_shape=MODELSCOPE_RESULT,
                        features=("seed", "dimensions", "steps")),
        ),
    )

    return Catalog(
        providers=MappingProxyType({p.id: p for p in (gitee, huggingface, modelscope)}),
        upscaler=UpscalerConfig(base_url=HF_SPACES["upscaler"], endpoint="realesrgan"),
    )
