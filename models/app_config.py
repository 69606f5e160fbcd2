"""Per-book application configuration (``config.json``)."""

from typing import Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.enums import AiResponseMode

DEFAULT_SYSTEM_PROMPT = (
    "Sos un editor literario experto. Tu tono debe ser intimo, sobrio y reflexivo. "
    "No uses estilo de autoayuda ni new age.\n"
    "No pidas confirmaciones ni hagas preguntas: aplica los cambios directamente.\n"
    "No agregues relleno ni explicaciones innecesarias.\n"
    "Si el cambio es grande, igual hacelo y al final agrega exactamente 5 bullets con resumen de cambios.\n"
    "Devolve solo el texto final (y el resumen cuando corresponda)."
)

DEFAULT_OLLAMA_OPTIONS: dict[str, Union[int, float, str, bool]] = {"top_p": 0.9}


class AppConfig(BaseModel):
    """Model, language and AI tuning knobs stored next to each book.

    JSON keys are camelCase; attributes are snake_case.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        use_enum_values=True,
    )

    model: str = "llama3.2:3b"
    language: str = "es"
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    temperature: float = Field(default=0.6, ge=0.0, le=2.0)
    audio_voice_name: str = ""
    audio_rate: float = 1.0
    audio_volume: float = 1.0
    ai_response_mode: AiResponseMode = AiResponseMode.EQUILIBRADO
    auto_versioning: bool = True
    ai_safe_mode: bool = True
    auto_apply_chat_changes: bool = True
    chat_apply_iterations: int = Field(default=1, ge=1)
    continuous_agent_enabled: bool = False
    continuous_agent_max_rounds: int = Field(default=3, ge=1, le=12)
    continuity_guard_enabled: bool = True
    ollama_options: dict[str, Union[bool, int, float, str]] = Field(
        default_factory=lambda: dict(DEFAULT_OLLAMA_OPTIONS)
    )
    autosave_interval_ms: int = Field(default=5000, ge=0)
    backup_enabled: bool = False
    backup_directory: str = ""
    backup_interval_ms: int = Field(default=300000, ge=0)
    accessibility_high_contrast: bool = False
    accessibility_large_text: bool = False

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
