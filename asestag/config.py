"""Decoder configuration."""

from pydantic_settings import BaseSettings


class DecoderSettings(BaseSettings):
    """Decoder settings."""

    # Limits
    MAX_CEL_BYTES: int = 256 * 1024 * 1024  # Largest inflated cel payload accepted

    # Frame timing
    DEFAULT_FRAME_DURATION_MS: int = 100  # Used when a frame and the header both say 0

    # Validation
    STRICT_FILE_SIZE: bool = False  # Reject files whose header size disagrees with the buffer

    model_config = {"env_prefix": "ASESTAG_"}


settings = DecoderSettings()
