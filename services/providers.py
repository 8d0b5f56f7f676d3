"""Provider adapters.

Every adapter exposes generate(request) -> GenerationResponse. The variants
differ in how they pick the backend endpoint and whether a token is
mandatory; payload construction and result mapping come from the model
catalog.
"""
import logging
import random
from typing import Any, List, Optional

from models.generation_request import GenerationRequest, GenerationResponse
from models.provider_config import (
    MAX_SEED,
    ModelConfig,
    ProviderConfig,
    ProviderKind,
    ResultShape,
    UpscalerConfig,
    upscale_payload,
)
from services.exceptions import ProtocolError, Unauthorized
from services.job_client import JobClient

logger = logging.getLogger(__name__)


def extract_url(result: List[Any], shape: ResultShape) -> Optional[str]:
    """Follow the shape's index and key path to the artifact URL"""
    if len(result) <= shape.url_index:
        return None
    value = result[shape.url_index]
    for key in shape.url_path:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    if isinstance(value, str) and value:
        return value
    return None


def _number_at(result: List[Any], index: Optional[int]):
    if index is None or len(result) <= index:
        return None
    value = result[index]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def extract_seed(result: List[Any], shape: ResultShape, fallback: int) -> int:
    value = _number_at(result, shape.seed_index)
    if value is None or (isinstance(value, float) and not value.is_integer()):
        return fallback
    return int(value)


def extract_duration(result: List[Any], shape: ResultShape) -> Optional[float]:
    value = _number_at(result, shape.duration_index)
    return float(value) if value is not None else None


class ProviderAdapter:
    """Base adapter shared by every hosted-space variant"""

    kind: ProviderKind

    def __init__(self, config: ProviderConfig, job_client: JobClient, rng: Optional[random.Random] = None):
        self.config = config
        self.job_client = job_client
        self.rng = rng or random.Random()

    @property
    def id(self) -> str:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.name

    def resolve_model(self, model_id: Optional[str]) -> ModelConfig:
        model = self.config.model(model_id)
        if model is None:
            model = self.config.model(self.config.default_model)
            if model_id:
                logger.warning(f"[{self.id}] Unknown model {model_id!r}, using {model.id}")
        return model

    def new_seed(self) -> int:
        return self.rng.randint(1, MAX_SEED - 1)

    def endpoint_for(self, model: ModelConfig) -> str:
        return model.endpoint

    def check_auth(self, request: GenerationRequest) -> None:
        pass

    def generate(self, request: GenerationRequest) -> GenerationResponse:
        self.check_auth(request)
        model = self.resolve_model(request.model)
        seed = request.seed if request.seed is not None else self.new_seed()
        resolved = request.model_copy(update={"model": model.id, "seed": seed})

        logger.info(f"[{self.id}] Generating with {model.id} on {model.base_url}")
        result = self.job_client.submit_and_await(
            model.base_url,
            self.endpoint_for(model),
            model.build_payload(resolved, seed),
            request.auth_token,
        )

        url = extract_url(result, model.result_shape)
        if not url:
            raise ProtocolError(f"No image returned from {self.name}")

        return GenerationResponse(
            url=url,
            seed=extract_seed(result, model.result_shape, seed),
            duration=extract_duration(result, model.result_shape),
        )


class HostedSpaceAdapter(ProviderAdapter):
    """One space per model, each with its own endpoint; token optional"""

    kind = ProviderKind.HOSTED_SPACE


class QuotaSpaceAdapter(ProviderAdapter):
    """Quota-gated spaces with a single canonical endpoint and a mandatory token"""

    kind = ProviderKind.QUOTA_SPACE

    def endpoint_for(self, model: ModelConfig) -> str:
        return self.config.endpoint or model.endpoint

    def check_auth(self, request: GenerationRequest) -> None:
        if not request.auth_token:
            raise Unauthorized(f"{self.config.auth_header} is required for {self.name}")


ADAPTER_TYPES = {
    ProviderKind.HOSTED_SPACE: HostedSpaceAdapter,
    ProviderKind.QUOTA_SPACE: QuotaSpaceAdapter,
}


def create_adapter(config: ProviderConfig, job_client: JobClient, rng: Optional[random.Random] = None) -> ProviderAdapter:
    return ADAPTER_TYPES[config.kind](config, job_client, rng)


class Upscaler:
    """Submits trusted image URLs to the fixed upscaler space"""

    def __init__(self, config: UpscalerConfig, job_client: JobClient):
        self.config = config
        self.job_client = job_client

    def upscale(self, url: str, scale: int, auth_token: Optional[str] = None) -> str:
        logger.info(f"Upscaling image x{scale}")
        result = self.job_client.submit_and_await(
            self.config.base_url,
            self.config.endpoint,
            upscale_payload(url, scale),
            auth_token,
        )
        upscaled = extract_url(result, self.config.result_shape)
        if not upscaled:
            raise ProtocolError("No image returned")
        return upscaled
