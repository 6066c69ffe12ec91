"""
HTTP API adapter for the text-to-image form.

Architectural role:
- Serve the form page and accept its submissions.
- Translate form fields into handler calls and handler results into JSON.
- Expose loader data (model registry and defaults) and a health probe.

Endpoint responsibilities:
- `GET /`: render the form page.
- `POST /`: handle one form submission.
- `GET /api/models`: list selectable models and form defaults.
- `GET /health`: readiness probe.

Request lifecycle (`POST /`):
1. Read form-encoded fields (`prompt`, `enhance`, `model`, `size`, `numSteps`)
   plus the button `action` (`generate`, `reset`, `toggle-enhance`).
2. For `generate`, delegate to `SubmissionHandler.handle_fields`.
3. Page script (`X-Requested-With: fetch`) and API callers get JSON:
   `{"image": ...}` (200) or `{"error": ...}` with the result status.
4. Plain browser form posts (`Accept: text/html`) get the page re-rendered
   with the submitted values and the image or error inline.

Error handling strategy:
- Validation and downstream failures are already normalized by the handler.
- The endpoint never raises for a failed generation.

Concurrency:
- Sync endpoints run in FastAPI's threadpool; the blocking downstream call
  does not stall the event loop.

Side effects:
- `create_app()` without arguments loads configuration from the environment.
- Emits request debug logs only when `DEBUG == "true"`.
"""

import logging
import os

from fastapi import FastAPI, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel

from imageform.config.settings import AppConfig, load_config
from imageform.core.handler import ImageGenerator, SubmissionHandler
from imageform.image.client import CloudflareImageClient
from imageform.ui.form import FormState, render_page


logger = logging.getLogger(__name__)

DEBUG = os.getenv("DEBUG") == "true"


def wants_html(request: Request) -> bool:
    """True for a plain browser form post, false for `fetch` and API callers."""
    if request.headers.get("x-requested-with") == "fetch":
        return False
    return "text/html" in request.headers.get("accept", "")


# ============================================================
# Response Schemas
# ============================================================

class ModelEntry(BaseModel):
    id: str
    path: str


class FormDefaults(BaseModel):
    model: str
    size: str
    numSteps: int


class StepBounds(BaseModel):
    min: int
    max: int


class ModelsResponse(BaseModel):
    """Loader payload used to populate the form."""

    models: list[ModelEntry]
    defaults: FormDefaults
    sizes: list[str]
    steps: StepBounds


# ============================================================
# Application Factory
# ============================================================

def create_app(
    config: AppConfig | None = None,
    generate_image: ImageGenerator | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Application configuration; loaded from the environment when omitted.
        generate_image: Image capability; a `CloudflareImageClient` when omitted.
    """
    config = config or load_config()
    if generate_image is None:
        generate_image = CloudflareImageClient(config).generate_image

    handler = SubmissionHandler(config, generate_image)
    app = FastAPI(title="TT text-to-image")

    @app.get("/", response_class=HTMLResponse)
    def index():
        return HTMLResponse(render_page(config))

    @app.post("/")
    def submit(
        request: Request,
        prompt: str = Form(""),
        enhance: str = Form("false"),
        model: str = Form(""),
        size: str = Form(""),
        numSteps: str = Form(""),
        action: str = Form("generate"),
    ):
        fields = {
            "prompt": prompt,
            "enhance": enhance,
            "model": model,
            "size": size,
            "numSteps": numSteps,
        }
        if DEBUG:
            logger.debug("Incoming submission (%s): %s", action, fields)

        state = FormState.from_form_fields(fields, config)
        result = None
        if action == "reset":
            state = state.reset(config)
        elif action == "toggle-enhance":
            state = state.toggle_enhance()
        else:
            result = handler.handle_fields(fields)

        if wants_html(request):
            status = result.status if result is not None else 200
            return HTMLResponse(render_page(config, state, result), status_code=status)
        if result is None:
            return JSONResponse(state.to_form_fields())
        return JSONResponse(status_code=result.status, content=result.to_body())

    @app.get("/api/models", response_model=ModelsResponse)
    def list_models():
        return ModelsResponse(
            models=[ModelEntry(id=model_id, path=path) for model_id, path in config.models.items()],
            defaults=FormDefaults(
                model=config.default_model_id,
                size=config.default_size,
                numSteps=config.default_num_steps,
            ),
            sizes=list(config.sizes),
            steps=StepBounds(min=config.min_steps, max=config.max_steps),
        )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app
