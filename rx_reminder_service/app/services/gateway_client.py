# app/services/gateway_client.py
import base64
import json
import logging
import re
from typing import Any, Dict, Optional, Union

import requests

from app.core.settings import (
    AI_GATEWAY_API_KEY,
    AI_GATEWAY_MAX_TOKENS,
    AI_GATEWAY_MODEL,
    AI_GATEWAY_TEMPERATURE,
    AI_GATEWAY_TIMEOUT_S,
    AI_GATEWAY_URL,
)
from app.services.extraction_prompt import EXTRACT_SYSTEM_PROMPT, EXTRACT_USER_PROMPT
from app.services.extraction_schema import EXTRACT_TOOL, EXTRACT_TOOL_NAME

logger = logging.getLogger(__name__)

class GatewayError(RuntimeError):
    kind = "upstream_error"

class GatewayRateLimitError(GatewayError):
    kind = "rate_limited"

class GatewayCreditsError(GatewayError):
    kind = "credits_exhausted"

_DATA_URL_RE = re.compile(r"^data:image/[a-z]+;base64,")
_FENCED_JSON_RE = re.compile(r"```json\s*([\s\S]*?)\s*```")
_FENCED_RE = re.compile(r"```\s*([\s\S]*?)\s*```")

def clean_base64(image: Union[bytes, str]) -> str:
    if isinstance(image, bytes):
        return base64.b64encode(image).decode("ascii")
    return _DATA_URL_RE.sub("", image.strip())

def _safe_json_parse(text: str) -> Dict[str, Any]:
    """Parse JSON even if the model wraps it in fences or extra prose."""
    text = (text or "").strip()
    m = _FENCED_JSON_RE.search(text) or _FENCED_RE.search(text)
    if m:
        text = m.group(1).strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        return json.loads(text[start : end + 1])
    raise json.JSONDecodeError("no JSON object found", text, 0)

def parse_gateway_response(data: Any) -> Dict[str, Any]:
    """
    Pull the extraction envelope out of a chat-completions reply.
    Tool-call arguments are preferred; plain content is the fallback and
    unparseable content becomes an empty extraction carrying the text.
    """
    if not isinstance(data, dict):
        logger.error("AI gateway reply is %s, not an object", type(data).__name__)
        raise GatewayError("Unexpected AI gateway response")

    choices = data.get("choices")
    choice = choices[0] if isinstance(choices, list) and choices else {}
    message = (choice.get("message") if isinstance(choice, dict) else None) or {}
    if not isinstance(message, dict):
        raise GatewayError("Unexpected AI gateway response")

    tool_calls = message.get("tool_calls")
    call = tool_calls[0] if isinstance(tool_calls, list) and tool_calls else {}
    function = (call.get("function") if isinstance(call, dict) else None) or {}
    arguments = function.get("arguments") if isinstance(function, dict) else None
    if arguments:
        try:
            out = json.loads(arguments) if isinstance(arguments, str) else arguments
        except json.JSONDecodeError as e:
            logger.error("could not parse tool call arguments: %.200s", arguments)
            raise GatewayError("Failed to parse AI response") from e
        if not isinstance(out, dict):
            raise GatewayError("Failed to parse AI response")
        return out

    content = message.get("content")
    if not content:
        raise GatewayError("No response from AI")
    if not isinstance(content, str):
        raise GatewayError("Unexpected AI gateway response")

    try:
        out = _safe_json_parse(content)
    except json.JSONDecodeError:
        logger.warning("AI content was not JSON, returning it as raw text only")
        return {"medicines": [], "confidence": 0, "rawText": content}
    if not isinstance(out, dict):
        return {"medicines": [], "confidence": 0, "rawText": content}
    return out

def scan_prescription_image(
    image: Union[bytes, str],
    api_key: Optional[str] = None,
    url: Optional[str] = None,
    model: Optional[str] = None,
    timeout_s: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Sends the prescription image to the AI gateway and returns the raw
    (un-normalized) extraction envelope: {medicines, confidence, rawText, ...}.
    """
    key = api_key or AI_GATEWAY_API_KEY
    if not key:
        raise GatewayError("AI_GATEWAY_API_KEY not configured")

    payload: Dict[str, Any] = {
        "model": model or AI_GATEWAY_MODEL,
        "messages": [
            {"role": "system", "content": EXTRACT_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": EXTRACT_USER_PROMPT},
                    {"type": "image_url", "image_url": {"url": f"data:image/jpeg;base64,{clean_base64(image)}"}},
                ],
            },
        ],
        "tools": [EXTRACT_TOOL],
        "tool_choice": {"type": "function", "function": {"name": EXTRACT_TOOL_NAME}},
        "max_completion_tokens": AI_GATEWAY_MAX_TOKENS,
        "temperature": AI_GATEWAY_TEMPERATURE,
    }
    headers = {"Authorization": f"Bearer {key}", "Content-Type": "application/json"}

    try:
        r = requests.post(url or AI_GATEWAY_URL, json=payload, headers=headers, timeout=timeout_s or AI_GATEWAY_TIMEOUT_S)
    except requests.RequestException as e:
        raise GatewayError(f"AI gateway unreachable: {e}") from e

    if r.status_code == 429:
        raise GatewayRateLimitError("Rate limit exceeded. Please try again in a moment.")
    if r.status_code == 402:
        raise GatewayCreditsError("AI credits exhausted. Please add credits to continue.")
    if r.status_code >= 400:
        logger.error("AI gateway error %s: %.300s", r.status_code, r.text)
        raise GatewayError(f"AI Gateway error: {r.status_code}")

    try:
        data = r.json()
    except ValueError as e:
        raise GatewayError("AI gateway returned a non-JSON body") from e
    return parse_gateway_response(data)
