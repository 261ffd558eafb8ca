"""Clients for the models catalog and inference service."""

from __future__ import annotations

import dataclasses
import json
import os
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional, Protocol

import requests

from .messages import ChatCompletion, ChatCompletionOptions, ChatCompletionResponse
from .modelkey import parse_model_key
from .models import CHAT_COMPLETION_TASK, ModelDetails, ModelSummary
from .sse import EventReader, StaticEventReader

NOTICE = (
    "ℹ︎ Azure hosted. AI powered, can make mistakes. Not intended for "
    "production/sensitive data.\n"
    "For more information, see https://github.com/github/gh-models"
)

DEFAULT_INFERENCE_ROOT = "https://models.github.ai"
DEFAULT_INFERENCE_PATH = "inference/chat/completions"
DEFAULT_AZURE_AI_STUDIO_URL = "https://api.catalog.azureml.ms"
DEFAULT_MODELS_URL = "https://models.github.ai/catalog/models"

_USER_AGENT = "github-cli-models"
_NON_STREAMING_MODELS = frozenset({"o1-mini", "o1-preview", "o1"})
_DEFAULT_RETRY_AFTER = timedelta(seconds=60)

_LOG_FORMAT = (
    "### {timestamp}\n\n"
    "POST {url}\n\n"
    "Authorization: Bearer {{{{$processEnv GITHUB_TOKEN}}}}\n"
    "Content-Type: application/json\n"
    "x-ms-useragent: github-cli-models\n"
    "x-ms-user-agent: github-cli-models\n\n"
    "{body}\n\n"
)


@dataclass
class AzureClientConfig:
    """The API locations the client talks to."""

    inference_root: str = DEFAULT_INFERENCE_ROOT
    inference_path: str = DEFAULT_INFERENCE_PATH
    azure_ai_studio_url: str = DEFAULT_AZURE_AI_STUDIO_URL
    models_url: str = DEFAULT_MODELS_URL


class ApiError(Exception):
    """An unsuccessful response from the service."""

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(ApiError):
    """The service refused the request because of rate limiting."""

    def __init__(self, retry_after: timedelta, message: str) -> None:
        self.retry_after = retry_after
        self.message = message
        super().__init__(str(self), status_code=429)

    def __str__(self) -> str:
        return (
            f"rate limited: {self.message} "
            f"(retry after {_format_duration(self.retry_after)})"
        )


class NotAuthenticatedError(Exception):
    """Raised by operations that need a token when none is available."""

    def __init__(self, operation: str = "") -> None:
        super().__init__("not authenticated")
        self.operation = operation


class ModelsClient(Protocol):
    """What the commands need from a models service client."""

    def get_chat_completion_stream(
        self, request: ChatCompletionOptions, org: str = ""
    ) -> ChatCompletionResponse:
        """Return a response whose reader yields chat completions."""

    def get_model_details(
        self, registry: str, model_name: str, version: str
    ) -> ModelDetails:
        """Return the details of a model in a registry."""

    def list_models(self) -> list[ModelSummary]:
        """Return the available models."""


def _format_duration(duration: timedelta) -> str:
    total = int(duration.total_seconds())
    sign = "-" if total < 0 else ""
    total = abs(total)
    if total == 0:
        return "0s"
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def _parse_seconds(value: Optional[str]) -> Optional[timedelta]:
    if value and re.fullmatch(r"[+-]?[0-9]+", value):
        return timedelta(seconds=int(value))
    return None


def _body_text(body: Any) -> str:
    if body is None:
        return ""
    if isinstance(body, (bytes, bytearray)):
        return bytes(body).decode("utf-8", errors="replace")
    return str(body)


def error_from_response(
    status_code: int, reason: str, headers: Mapping[str, str], body: Any
) -> ApiError:
    """Build the exception that describes an unsuccessful response."""
    text = _body_text(body)

    if status_code == 429:
        retry_after = timedelta(0)
        parsed = _parse_seconds(_header(headers, "x-ratelimit-timeremaining"))
        if parsed is not None:
            retry_after = parsed
        if not retry_after:
            parsed = _parse_seconds(_header(headers, "Retry-After"))
            if parsed is not None:
                retry_after = parsed
        if not retry_after:
            retry_after = _DEFAULT_RETRY_AFTER
        message = text if text else "rate limit exceeded"
        return RateLimitError(retry_after, message.strip())

    if status_code == 401:
        message = "unauthorized"
    elif status_code == 400:
        message = "bad request"
    else:
        message = f"unexpected response from the server: {status_code} {reason}".rstrip()

    if text:
        message = f"{message}\n{text}\n"
    return ApiError(message, status_code=status_code)


def reset_http_log_file(path: str) -> None:
    """Remove an existing HTTP log file so a fresh log can start."""
    if not path:
        return
    try:
        os.remove(path)
    except OSError:
        pass


_LANGUAGE_NAMES = {
    "af": "Afrikaans", "am": "Amharic", "ar": "Arabic", "as": "Assamese",
    "az": "Azerbaijani", "be": "Belarusian", "bg": "Bulgarian", "bn": "Bangla",
    "bs": "Bosnian", "ca": "Catalan", "cs": "Czech", "cy": "Welsh",
    "da": "Danish", "de": "German", "el": "Greek", "en": "English",
    "es": "Spanish", "et": "Estonian", "eu": "Basque", "fa": "Persian",
    "fi": "Finnish", "fil": "Filipino", "fr": "French", "ga": "Irish",
    "gl": "Galician", "gu": "Gujarati", "ha": "Hausa", "he": "Hebrew",
    "hi": "Hindi", "hr": "Croatian", "hu": "Hungarian", "hy": "Armenian",
    "id": "Indonesian", "ig": "Igbo", "is": "Icelandic", "it": "Italian",
    "ja": "Japanese", "jv": "Javanese", "ka": "Georgian", "kk": "Kazakh",
    "km": "Khmer", "kn": "Kannada", "ko": "Korean", "ky": "Kyrgyz",
    "lo": "Lao", "lt": "Lithuanian", "lv": "Latvian", "mk": "Macedonian",
    "ml": "Malayalam", "mn": "Mongolian", "mr": "Marathi", "ms": "Malay",
    "my": "Burmese", "nb": "Norwegian Bokmål", "ne": "Nepali", "nl": "Dutch",
    "nn": "Norwegian Nynorsk", "no": "Norwegian", "or": "Odia",
    "pa": "Punjabi", "pl": "Polish", "ps": "Pashto", "pt": "Portuguese",
    "ro": "Romanian", "ru": "Russian", "si": "Sinhala", "sk": "Slovak",
    "sl": "Slovenian", "so": "Somali", "sq": "Albanian", "sr": "Serbian",
    "sv": "Swedish", "sw": "Swahili", "ta": "Tamil", "te": "Telugu",
    "tg": "Tajik", "th": "Thai", "tk": "Turkmen", "tr": "Turkish",
    "uk": "Ukrainian", "ur": "Urdu", "uz": "Uzbek", "vi": "Vietnamese",
    "xh": "Xhosa", "yo": "Yoruba", "zh": "Chinese", "zu": "Zulu",
}

_REGIONAL_LANGUAGE_NAMES = {
    "en-us": "American English", "en-gb": "British English",
    "en-au": "Australian English", "en-ca": "Canadian English",
    "es-es": "European Spanish", "es-mx": "Mexican Spanish",
    "es-419": "Latin American Spanish", "fr-ca": "Canadian French",
    "fr-ch": "Swiss French", "pt-br": "Brazilian Portuguese",
    "pt-pt": "European Portuguese", "zh-hans": "Simplified Chinese",
    "zh-hant": "Traditional Chinese", "nl-be": "Flemish",
}

_LANGUAGE_TAG = re.compile(r"[A-Za-z]{2,8}(?:[-_][A-Za-z0-9]{1,8})*")


def convert_language_codes_to_names(codes: list[str]) -> list[str]:
    """Turn language tags such as ``en`` into English names such as ``English``.

    Raises ValueError for a string that is not a language tag.
    """
    names = []
    for code in codes:
        if not _LANGUAGE_TAG.fullmatch(code):
            raise ValueError(f"invalid language code: {code}")
        normalized = code.replace("_", "-").lower()
        base = normalized.split("-", 1)[0]
        names.append(
            _REGIONAL_LANGUAGE_NAMES.get(normalized)
            or _LANGUAGE_NAMES.get(base)
            or code
        )
    return names


class _LineStream:
    """Presents a streamed HTTP response as lines for the event reader."""

    def __init__(self, response: Any) -> None:
        self._response = response
        self._lines = iter(response.iter_lines())

    def readline(self) -> bytes:
        try:
            line = next(self._lines)
        except StopIteration:
            return b""
        if isinstance(line, str):
            line = line.encode("utf-8")
        return line + b"\n"

    def close(self) -> None:
        self._response.close()


def _timestamp() -> str:
    stamp = datetime.now().astimezone().isoformat(timespec="seconds")
    return stamp.replace("+00:00", "Z")


class AzureClient:
    """An authenticated client for the models service."""

    def __init__(
        self,
        token: str,
        config: Optional[AzureClientConfig] = None,
        session: Any = None,
        http_log_file: str = "",
    ) -> None:
        self._token = token
        self._config = config or AzureClientConfig()
        self._session = session if session is not None else requests.Session()
        self._http_log_file = http_log_file

    def _inference_url(self, org: str) -> str:
        cfg = self._config
        if org:
            return f"{cfg.inference_root}/orgs/{org}/{cfg.inference_path}"
        return f"{cfg.inference_root}/{cfg.inference_path}"

    def _log_request(self, url: str, body: str) -> None:
        if not self._http_log_file:
            return
        try:
            with open(self._http_log_file, "a", encoding="utf-8") as log:
                log.write(_LOG_FORMAT.format(timestamp=_timestamp(), url=url, body=body))
        except OSError:
            pass

    def get_chat_completion_stream(
        self, request: ChatCompletionOptions, org: str = ""
    ) -> ChatCompletionResponse:
        """Send a chat completion request and return a reader of completions."""
        stream = request.model not in _NON_STREAMING_MODELS
        request = dataclasses.replace(request, stream=stream)
        body = json.dumps(request.to_dict(), separators=(",", ":"), ensure_ascii=False)
        url = self._inference_url(org)
        self._log_request(url, body)

        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
            "x-ms-useragent": _USER_AGENT,
            "x-ms-user-agent": _USER_AGENT,
        }
        response = self._session.post(
            url, data=body.encode("utf-8"), headers=headers, stream=True
        )

        if response.status_code != 200:
            try:
                raise error_from_response(
                    response.status_code, response.reason, response.headers, response.content
                )
            finally:
                response.close()

        if stream:
            reader: Any = EventReader(_LineStream(response), ChatCompletion.from_dict)
        else:
            try:
                completion = ChatCompletion.from_dict(response.json())
            finally:
                response.close()
            reader = StaticEventReader([completion])
        return ChatCompletionResponse(reader=reader)

    def _get_json(self, url: str) -> Any:
        response = self._session.get(url, headers={"Content-Type": "application/json"})
        try:
            if response.status_code != 200:
                raise error_from_response(
                    response.status_code, response.reason, response.headers, response.content
                )
            return response.json()
        finally:
            response.close()

    def get_model_details(
        self, registry: str, model_name: str, version: str
    ) -> ModelDetails:
        """Fetch the catalog details of a model."""
        url = (
            f"{self._config.azure_ai_studio_url}/asset-gallery/v1.0/"
            f"{registry}/models/{model_name}/version/{version}"
        )
        data = self._get_json(url) or {}

        details = ModelDetails(
            description=data.get("description") or "",
            license=data.get("license") or "",
            license_description=data.get("licenseDescription") or "",
            notes=data.get("notes") or "",
            tags=[keyword.lower() for keyword in data.get("keywords") or []],
            evaluation=data.get("evaluation") or "",
        )

        limits = data.get("modelLimits")
        if limits is not None:
            details.supported_input_modalities = list(limits.get("supportedInputModalities") or [])
            details.supported_output_modalities = list(
                limits.get("supportedOutputModalities") or []
            )
            details.supported_languages = convert_language_codes_to_names(
                limits.get("supportedLanguages") or []
            )
            text_limits = limits.get("textLimits")
            if text_limits is not None:
                details.max_output_tokens = int(text_limits.get("maxOutputTokens") or 0)
                details.max_input_tokens = int(text_limits.get("inputContextWindow") or 0)

        playground = data.get("playgroundLimits")
        if playground is not None:
            details.rate_limit_tier = playground.get("rateLimitTier") or ""

        return details

    def list_models(self) -> list[ModelSummary]:
        """Fetch the catalog of available models."""
        catalog = self._get_json(self._config.models_url) or []
        models = []
        for entry in catalog:
            inputs = entry.get("supported_input_modalities") or []
            outputs = entry.get("supported_output_modalities") or []
            task = CHAT_COMPLETION_TASK if "text" in inputs and "text" in outputs else ""

            model_id = entry.get("id") or ""
            try:
                key = parse_model_key(model_id)
            except ValueError as err:
                raise ValueError(f'parsing model key "{model_id}": {err}') from err

            models.append(
                ModelSummary(
                    id=model_id,
                    name=key.model_name,
                    registry=entry.get("registry") or "",
                    friendly_name=entry.get("name") or "",
                    task=task,
                    publisher=entry.get("publisher") or "",
                    summary=entry.get("summary") or "",
                    version=entry.get("version") or "",
                )
            )
        return models


class UnauthenticatedClient:
    """A client for anonymous users; every operation needs authentication.

    Each refused call raises NotAuthenticatedError naming the operation.
    """

    def get_chat_completion_stream(
        self, request: ChatCompletionOptions, org: str = ""
    ) -> ChatCompletionResponse:
        operation = f"chat completion with {request.model}" if request.model else "chat completion"
        raise NotAuthenticatedError(operation)

    def get_model_details(
        self, registry: str, model_name: str, version: str
    ) -> ModelDetails:
        operation = f"model details for {registry}/{model_name}@{version}"
        raise NotAuthenticatedError(operation)

    def list_models(self) -> list[ModelSummary]:
        operation = "list models"
        raise NotAuthenticatedError(operation)