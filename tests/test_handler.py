import base64

import pytest

from imageform.core.errors import AppError
from imageform.core.handler import ENHANCE_MARKER, SubmissionHandler, adapt_prompt
from imageform.core.result_types import ErrorKind, ErrorResult, ImageResult
from imageform.core.submission import Submission

from conftest import RecordingGenerator


def make_submission(**overrides):
    values = {
        "prompt": "a red fox in the snow",
        "enhance": False,
        "model_id": "FLUX.1-Schnell-CF",
        "size": "1024x1024",
        "num_steps": 4,
    }
    values.update(overrides)
    return Submission(**values)


@pytest.mark.parametrize("prompt", ["", None])
def test_empty_prompt_is_rejected(config, generator, prompt):
    result = SubmissionHandler(config, generator).handle(make_submission(prompt=prompt))

    assert isinstance(result, ErrorResult)
    assert result.status == 400
    assert result.kind is ErrorKind.VALIDATION
    assert generator.calls == []


@pytest.mark.parametrize("model_id", ["", "missing-model", "@cf/black-forest-labs/flux-1-schnell"])
def test_unknown_model_is_rejected(config, generator, model_id):
    result = SubmissionHandler(config, generator).handle(make_submission(model_id=model_id))

    assert result.status == 400
    assert result.message == "无效的模型"
    assert generator.calls == []


def test_unsupported_size_and_steps_are_rejected(config, generator):
    handler = SubmissionHandler(config, generator)

    assert handler.handle(make_submission(size="640x480")).status == 400
    assert handler.handle(make_submission(num_steps=3)).status == 400
    assert handler.handle(make_submission(num_steps=9)).status == 400
    assert generator.calls == []


def test_enhance_prefixes_marker(config, generator):
    SubmissionHandler(config, generator).handle(make_submission(enhance=True, prompt="castle"))

    assert generator.calls[0][0] == f"{ENHANCE_MARKER} castle"
    assert generator.calls[0][0] == "---tl castle"


def test_prompt_forwarded_unchanged_without_enhance(config, generator):
    SubmissionHandler(config, generator).handle(make_submission(prompt="  castle  "))

    assert generator.calls[0][0] == "  castle  "
    assert adapt_prompt("castle", False) == "castle"


def test_delegates_resolved_model_path_size_and_steps(config, generator):
    SubmissionHandler(config, generator).handle(
        make_submission(model_id="SDXL-Base-CF", size="512x512", num_steps=8)
    )

    assert generator.calls == [
        ("a red fox in the snow", "@cf/stabilityai/stable-diffusion-xl-base-1.0", "512x512", 8)
    ]


def test_success_returns_base64_image(config):
    payload = bytes(range(256))
    result = SubmissionHandler(config, RecordingGenerator(result=payload)).handle(make_submission())

    assert isinstance(result, ImageResult)
    assert result.status == 200
    assert result.image == base64.b64encode(payload).decode()
    assert result.to_body() == {"image": result.image}


def test_app_error_status_and_message_propagate(config):
    stub = RecordingGenerator(error=AppError("x", status=403))
    result = SubmissionHandler(config, stub).handle(make_submission())

    assert result.kind is ErrorKind.DOWNSTREAM
    assert result.status == 403
    assert "x" in result.message
    assert result.to_body() == {"error": "生成图片失败: x"}


def test_app_error_without_status_defaults_to_500(config):
    stub = RecordingGenerator(error=AppError("quota", status=None))
    result = SubmissionHandler(config, stub).handle(make_submission())

    assert result.kind is ErrorKind.DOWNSTREAM
    assert result.status == 500


def test_generic_error_becomes_500(config):
    stub = RecordingGenerator(error=RuntimeError("connection reset"))
    result = SubmissionHandler(config, stub).handle(make_submission())

    assert result.kind is ErrorKind.UNKNOWN
    assert result.status == 500
    assert result.message == "生成图片失败: 未知错误"
    assert "connection reset" not in result.message


def test_handle_fields_parses_form_strings(config, generator, valid_fields):
    valid_fields.update(enhance="true", numSteps="6")
    result = SubmissionHandler(config, generator).handle_fields(valid_fields)

    assert result.ok
    assert generator.calls == [
        ("---tl a red fox in the snow", "@cf/black-forest-labs/flux-1-schnell", "1024x1024", 6)
    ]


@pytest.mark.parametrize("steps", ["", "four", "4.5", None])
def test_handle_fields_rejects_non_integer_steps(config, generator, valid_fields, steps):
    valid_fields["numSteps"] = steps
    result = SubmissionHandler(config, generator).handle_fields(valid_fields)

    assert result.status == 400
    assert result.kind is ErrorKind.VALIDATION
    assert generator.calls == []


@pytest.mark.parametrize("enhance", ["True", "TRUE", "1", "yes", "on", "", None])
def test_only_exact_true_enables_enhance(config, generator, valid_fields, enhance):
    valid_fields["enhance"] = enhance
    SubmissionHandler(config, generator).handle_fields(valid_fields)

    assert generator.calls[0][0] == "a red fox in the snow"


def test_missing_prompt_reported_before_bad_steps(config, generator, valid_fields):
    valid_fields.update(prompt="", numSteps="abc")
    result = SubmissionHandler(config, generator).handle_fields(valid_fields)

    assert result.status == 400
    assert result.message == "未找到提示词"


def test_unknown_model_reported_before_bad_steps(config, generator, valid_fields):
    valid_fields.update(model="Nope", numSteps="")
    result = SubmissionHandler(config, generator).handle_fields(valid_fields)

    assert result.message == "无效的模型"


def test_result_status_and_ok_are_fixed_by_variant():
    with pytest.raises(TypeError):
        ImageResult("QUJD", status=500)
    with pytest.raises(TypeError):
        ErrorResult(ErrorKind.UNKNOWN, "boom", 500, ok=True)

    assert ImageResult("QUJD").status == 200
    assert ImageResult("QUJD").ok is True
    assert ErrorResult(ErrorKind.UNKNOWN, "boom", 500).ok is False
