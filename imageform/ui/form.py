"""Form state and page rendering for the text-to-image form.

Architectural role:
    Holds the per-session field state of the form and renders the single HTML
    page served at `/`.

Page modes:
    - Without JavaScript every button posts the form with an `action` of
      `generate`, `reset`, or `toggle-enhance`, and the server re-renders the
      page from `FormState` with the result inline.
    - With JavaScript the page script in `templates/index.html` posts via
      `fetch`, keeps one submission in flight, disables controls while
      waiting, and resets to the defaults produced by `FormState.defaults`.

Rendering:
    Jinja2 with autoescaping; model options come from the configured registry.
"""

from dataclasses import dataclass, replace

from jinja2 import Environment, PackageLoader, select_autoescape

from imageform.config.settings import AppConfig
from imageform.core.result_types import GenerationResult
from imageform.core.submission import parse_steps


_env = Environment(
    loader=PackageLoader("imageform.ui", "templates"),
    autoescape=select_autoescape(["html"]),
)

PAGE_TITLE = "TTの文生图"
HOME_URL = "https://www.200597.xyz/"


@dataclass(frozen=True)
class FormState:
    prompt: str
    enhance: bool
    model_id: str
    size: str
    num_steps: int

    @classmethod
    def defaults(cls, config: AppConfig) -> "FormState":
        return cls(
            prompt="",
            enhance=False,
            model_id=config.default_model_id,
            size=config.default_size,
            num_steps=config.default_num_steps,
        )

    @classmethod
    def from_form_fields(cls, fields, config: AppConfig) -> "FormState":
        """Rebuild the state echoed back after a plain form post.

        An unparsable step count falls back to the configured default.
        """
        steps = parse_steps(fields.get("numSteps"))
        return cls(
            prompt=fields.get("prompt") or "",
            enhance=fields.get("enhance") == "true",
            model_id=fields.get("model") or config.default_model_id,
            size=fields.get("size") or config.default_size,
            num_steps=config.default_num_steps if steps is None else steps,
        )

    def reset(self, config: AppConfig) -> "FormState":
        return FormState.defaults(config)

    def toggle_enhance(self) -> "FormState":
        return replace(self, enhance=not self.enhance)

    def to_form_fields(self) -> dict:
        """Serialize into the inbound wire field set."""
        return {
            "prompt": self.prompt,
            "enhance": "true" if self.enhance else "false",
            "model": self.model_id,
            "size": self.size,
            "numSteps": str(self.num_steps),
        }


def render_page(
    config: AppConfig,
    state: FormState | None = None,
    result: GenerationResult | None = None,
) -> str:
    """Render the full form page.

    Args:
        config: Source of model options, sizes, step bounds, and defaults.
        state: Field values to prefill; defaults when omitted.
        result: Optional server-side result to show under the form.
    """
    state = state or FormState.defaults(config)
    defaults = FormState.defaults(config)
    template = _env.get_template("index.html")
    return template.render(
        title=PAGE_TITLE,
        home_url=HOME_URL,
        models=list(config.models),
        sizes=config.sizes,
        min_steps=config.min_steps,
        max_steps=config.max_steps,
        state=state,
        defaults=defaults.to_form_fields(),
        result=result,
    )
