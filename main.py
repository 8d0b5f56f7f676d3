from fastapi import APIRouter, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
import logging
import random
from typing import Any, Callable, Dict, Optional
from contextlib import asynccontextmanager

from models.generation_request import GenerationRequest, GenerationResponse, UpscaleRequest, UpscaleResponse
from models.provider_config import build_catalog
from services.exceptions import GatewayError, InvalidRequest, Unauthorized
from services.job_client import JobClient
from services.providers import Upscaler
from services.registry import ProviderRegistry
from services.settings import Settings
from services.validation import (
    is_allowed_image_url,
    validate_dimensions,
    validate_prompt,
    validate_scale,
    validate_steps,
)

# Load settings (including .env) before anything logs
settings = Settings.from_env()

# Configure logging
logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


async def read_json_body(request: Request) -> Dict[str, Any]:
    """Parse the request body as a JSON object; null fields count as absent"""
    try:
        body = await request.json()
    except ValueError:
        raise InvalidRequest("Invalid JSON body")
    if not isinstance(body, dict):
        raise InvalidRequest("Invalid JSON body")
    return {key: value for key, value in body.items() if value is not None}


def check(verdict) -> None:
    if not verdict.valid:
        raise InvalidRequest(verdict.error)


def parse_generation_request(data: Dict[str, Any]) -> GenerationRequest:
    try:
        return GenerationRequest.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise InvalidRequest(f"Invalid {field}: {first['msg']}")


def build_generation_request(body: Dict[str, Any], config: Settings, **overrides) -> GenerationRequest:
    """Validate prompt, dimensions and steps in that order, then build the request"""
    width = body.get("width", 1024)
    height = body.get("height", 1024)
    steps = body.get("steps", body.get("num_inference_steps", 9))

    check(validate_prompt(body.get("prompt"), config.max_prompt_length))
    check(validate_dimensions(width, height, config.min_dimension, config.max_dimension, config.dimension_alignment))
    check(validate_steps(steps, config.min_steps, config.max_steps))

    request = parse_generation_request(body)
    return request.model_copy(update={"width": int(width), "height": int(height), "steps": int(steps), **overrides})


async def call_backend(label: str, func: Callable, *args, fallback_message: str = "Image generation failed"):
    """Run a blocking backend call off the event loop, keeping the error kind in the logs"""
    try:
        return await run_in_threadpool(func, *args)
    except GatewayError as e:
        logger.error(f"{label} failed [{e.kind}]: {e.message}")
        raise
    except Exception as e:
        logger.exception(f"{label} failed unexpectedly: {e}")
        raise GatewayError(fallback_message)


@router.get("/")
async def api_root():
    return {"message": "Z-Image API is running"}


@router.get("/providers")
async def list_providers(request: Request):
    return {"providers": request.app.state.registry.list_providers()}


@router.get("/providers/{provider}/models")
async def list_provider_models(provider: str, request: Request):
    registry: ProviderRegistry = request.app.state.registry
    if not registry.has(provider):
        raise InvalidRequest(f"Invalid provider: {provider}")
    return {"provider": provider, "models": registry.list_models(provider)}


@router.get("/models")
async def list_models(request: Request):
    return {"models": request.app.state.registry.list_all_models()}


@router.post("/generate")
async def generate(request: Request):
    config: Settings = request.app.state.settings
    registry: ProviderRegistry = request.app.state.registry

    body = await read_json_body(request)

    provider_id = body.get("provider") or config.default_provider
    if not registry.has(provider_id):
        raise InvalidRequest(f"Invalid provider: {provider_id}")

    provider = registry.config(provider_id)
    auth_token = request.headers.get(provider.auth_header) or None
    if provider.requires_auth and not auth_token:
        raise Unauthorized(f"{provider.auth_header} is required for {provider.name}")

    generation_request = build_generation_request(body, config, provider=provider_id, auth_token=auth_token)

    model_id = generation_request.model
    if config.strict_models and model_id and provider.model(model_id) is None:
        raise InvalidRequest(f"Invalid model for {provider.name}: {model_id}")

    adapter = registry.resolve(provider_id)
    result: GenerationResponse = await call_backend(f"{provider_id} generation", adapter.generate, generation_request)
    return result.model_dump(exclude_none=True)


@router.post("/generate-hf")
async def generate_hf(request: Request):
    """Legacy HuggingFace-only endpoint"""
    config: Settings = request.app.state.settings
    registry: ProviderRegistry = request.app.state.registry

    body = await read_json_body(request)
    check(validate_prompt(body.get("prompt"), config.max_prompt_length))

    width = body.get("width", 1024)
    height = body.get("height", 1024)
    check(validate_dimensions(width, height, config.min_dimension, config.max_dimension, config.dimension_alignment))

    legacy = {k: body[k] for k in ("prompt", "seed") if k in body}
    generation_request = parse_generation_request({
        **legacy,
        "provider": "huggingface",
        "model": body.get("model") or "z-image-turbo",
        "width": int(width),
        "height": int(height),
        "auth_token": request.headers.get("X-HF-Token") or None,
    })

    adapter = registry.resolve("huggingface")
    result: GenerationResponse = await call_backend(
        "huggingface legacy generation", adapter.generate, generation_request,
        fallback_message="Generation failed",
    )
    return result.model_dump(exclude_none=True)


@router.post("/upscale")
async def upscale(request: Request):
    config: Settings = request.app.state.settings
    upscaler: Upscaler = request.app.state.upscaler

    body = await read_json_body(request)

    url = body.get("url")
    if not url or not isinstance(url, str):
        raise InvalidRequest("url is required")
    if not is_allowed_image_url(url, config.allowed_image_hosts):
        raise InvalidRequest("URL not allowed")

    scale = body.get("scale", upscaler.config.default_scale)
    check(validate_scale(scale, upscaler.config.allowed_scales))
    upscale_request = UpscaleRequest(url=url, scale=scale)

    hf_token = request.headers.get("X-HF-Token") or None
    upscaled = await call_backend(
        "upscale", upscaler.upscale, upscale_request.url, upscale_request.scale, hf_token,
        fallback_message="Upscale failed",
    )
    return UpscaleResponse(url=upscaled).model_dump()


async def gateway_error_handler(request: Request, exc: GatewayError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def create_app(
    config: Optional[Settings] = None,
    job_client: Optional[JobClient] = None,
    rng: Optional[random.Random] = None,
) -> FastAPI:
    config = config or settings
    job_client = job_client or JobClient(timeout=config.backend_timeout)
    catalog = build_catalog()
    registry = ProviderRegistry.from_catalog(catalog, job_client, rng)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Gateway ready with providers: {', '.join(p['id'] for p in registry.list_providers())}")
        yield
        logger.info("Shutting down gateway...")
        job_client.session.close()

    app = FastAPI(
        title="Z-Image Gateway",
        description="Unified API over hosted image generation spaces",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.registry = registry
    app.state.upscaler = Upscaler(catalog.upscaler, job_client)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", *registry.auth_headers()],
    )
    app.add_exception_handler(GatewayError, gateway_error_handler)

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "providers": [p["id"] for p in registry.list_providers()],
            "backend_timeout": config.backend_timeout,
        }

    @app.get("/ping")
    async def ping():
        return {"status": "ok"}

    app.include_router(router)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False
    )
