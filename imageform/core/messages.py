"""User-facing message strings.

The form page is a Chinese-language UI; every error surfaced to the browser
uses these strings.
"""

MISSING_PROMPT = "未找到提示词"
INVALID_MODEL = "无效的模型"
INVALID_SIZE = "无效的图片尺寸"
INVALID_STEPS = "无效的生成步数"

GENERATION_FAILED = "生成图片失败: {detail}"
UNKNOWN_FAILURE = "未知错误"
