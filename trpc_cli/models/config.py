"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_RPC_URL = "http://localhost:9091/transmission/rpc"


class ClientConfig(BaseModel):
    """A validated configuration model for the application."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Daemon endpoint
    url: str = DEFAULT_RPC_URL
    timeout: float = 30.0

    # HTTP basic authentication
    username: str = ""
    password: str = ""

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Ensures the endpoint is an HTTP(S) URL."""
        if not v:
            raise ValueError("RPC url cannot be empty.")
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"RPC url must start with http:// or https://, got: {v}")
        return v

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Ensures a reasonable request timeout."""
        if v < 1 or v > 600:
            raise ValueError("Timeout must be between 1 and 600 seconds.")
        return v

    @model_validator(mode="after")
    def validate_credentials(self) -> "ClientConfig":
        """Checks that a password always comes with a username."""
        if self.password and not self.username:
            raise ValueError("A password was configured without a username.")
        return self

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
