from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..constants import DEFAULT_ORIGIN


class AuthScheme(StrEnum):
    PASSWORD = "password"
    TOKEN = "token"


class LoginLevel(StrEnum):
    ADMIN = "admin"
    MOD = "mod"
    NONE = "none"


class EndpointConfig(BaseModel):
    """One remote VM node the bot keeps a connection to.

    Attributes:
        url: Websocket URL of the VM server.
        node_id: Node identifier sent in ``connect`` requests.
        origin: Optional ``Origin`` header override.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(min_length=1)
    node_id: str = Field(min_length=1, alias="nodeId")
    origin: str | None = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("ws://", "wss://")):
            raise ValueError("url must be a ws:// or wss:// address")
        return v

    @property
    def effective_origin(self) -> str:
        return self.origin or DEFAULT_ORIGIN


class BotConfig(BaseModel):
    """Process-wide bot configuration.

    Keys may be given in snake_case or in the camelCase spelling used by
    older config files (``authType``, ``botToken`` ...).

    Attributes:
        prefix: Command prefix.
        colon_emoji: Accept ``:name:`` as a shorthand for ``emoji name``.
        vms: Endpoints to connect to.
        auth_type: Authentication scheme.
        admin_password: Password for ``admin`` elevation (password scheme).
        bot_token: Token sent in ``login`` frames (token scheme).
        login_as: Desired elevation level under the password scheme.
        username: Display name requested on connect.
        data_file: JSON file used by the bundled store.
        status_file: Optional path of the connection status file.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    prefix: str = Field(default="!", min_length=1)
    colon_emoji: bool = Field(default=False, alias="colonEmoji")
    vms: tuple[EndpointConfig, ...] = Field(min_length=1)
    auth_type: AuthScheme = Field(default=AuthScheme.PASSWORD, alias="authType")
    admin_password: str = Field(default="", alias="adminPassword")
    bot_token: str = Field(default="", alias="botToken")
    login_as: LoginLevel = Field(default=LoginLevel.ADMIN, alias="loginAs")
    username: str = Field(min_length=1)
    data_file: str = Field(default="emojis.json", alias="dataFile")
    status_file: str | None = Field(default=None, alias="statusFile")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("username cannot be blank")
        return v

    @model_validator(mode="after")
    def validate_endpoints(self) -> BotConfig:
        seen: set[str] = set()
        for vm in self.vms:
            if vm.node_id in seen:
                raise ValueError(f"duplicate node id: {vm.node_id}")
            seen.add(vm.node_id)
        return self

    @model_validator(mode="after")
    def validate_auth(self) -> BotConfig:
        """Validate the secret required by the selected scheme."""
        if self.auth_type is AuthScheme.TOKEN and not self.bot_token:
            raise ValueError("invalid auth: token scheme requires bot_token")
        if (
            self.auth_type is AuthScheme.PASSWORD
            and self.wants_elevation
            and not self.admin_password
        ):
            raise ValueError(
                "invalid auth: password scheme with login_as admin/mod requires admin_password"
            )
        return self

    @property
    def wants_elevation(self) -> bool:
        return self.login_as in (LoginLevel.ADMIN, LoginLevel.MOD)

    @property
    def node_ids(self) -> tuple[str, ...]:
        return tuple(vm.node_id for vm in self.vms)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BotConfig:
        return cls.model_validate(data)
