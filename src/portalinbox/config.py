"""Summary: Configuration for the portal inbox engine.

Importance: Centralizes data source, Web API, and relationship settings in one validated struct.
Alternatives: Deep-merge loose dictionaries at startup.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping


DEFAULT_PREFIX = "msfed"


@dataclass(frozen=True)
class OperationConfig:
    """Summary: Enablement and query shaping for one Web API operation.

    Importance: Keeps writes opt-in and lets deployments tune the OData query.
    Alternatives: Hardcode the query string in the data source.
    """

    enabled: bool = False
    select: str | None = None
    filter: str | None = None
    order_by: str | None = None
    expand: str | None = None

    @staticmethod
    def from_dict(data: Mapping[str, Any] | None, enabled: bool = False) -> "OperationConfig":
        data = data or {}
        return OperationConfig(
            enabled=bool(data.get("enabled", enabled)),
            select=data.get("select") or None,
            filter=data.get("filter") or None,
            order_by=data.get("orderBy") or None,
            expand=data.get("expand") or None,
        )


@dataclass(frozen=True)
class OperationsConfig:
    """Summary: Per-operation settings for read, create, update, and delete.

    Importance: Mirrors the portal table permissions the deployment grants.
    Alternatives: Use a single read-only flag.
    """

    read: OperationConfig = field(default_factory=lambda: OperationConfig(enabled=True))
    create: OperationConfig = field(default_factory=lambda: OperationConfig(enabled=True))
    update: OperationConfig = field(default_factory=lambda: OperationConfig(enabled=True))
    delete: OperationConfig = field(default_factory=OperationConfig)

    @staticmethod
    def from_dict(data: Mapping[str, Any] | None) -> "OperationsConfig":
        data = data or {}
        return OperationsConfig(
            read=OperationConfig.from_dict(data.get("read"), enabled=True),
            create=OperationConfig.from_dict(data.get("create"), enabled=True),
            update=OperationConfig.from_dict(data.get("update"), enabled=True),
            delete=OperationConfig.from_dict(data.get("delete"), enabled=False),
        )


@dataclass(frozen=True)
class RegardingObjectConfig:
    """Summary: Relationship metadata for the parent business record.

    Importance: Replies must bind to the same parent record as the original comment.
    Alternatives: Always bind replies to a fixed entity.
    """

    entity_name: str = ""
    entity_set_name: str = ""
    navigation_property: str = ""

    def resolve(self, prefix: str) -> "RegardingObjectConfig":
        """Summary: Fill unset names from the publisher prefix.

        Importance: Lets deployments override only the names that differ.
        Alternatives: Require every name explicitly.
        """

        return RegardingObjectConfig(
            entity_name=self.entity_name or f"{prefix}_application",
            entity_set_name=self.entity_set_name or f"{prefix}_applications",
            navigation_property=self.navigation_property or f"regardingobjectid_{prefix}_application",
        )


@dataclass(frozen=True)
class PortalDataSourceConfig:
    """Summary: Settings for the portal Web API data source.

    Importance: Describes the comment collection and how replies and reads are written back.
    Alternatives: Discover entity metadata from the $metadata document at runtime.
    """

    base_url: str
    entity_set_name: str = "adx_portalcomments"
    field_mapping: dict[str, str] = field(default_factory=dict)
    regarding_object: RegardingObjectConfig = field(default_factory=RegardingObjectConfig)
    operations: OperationsConfig = field(default_factory=OperationsConfig)
    contact_entity_set: str = "contacts"
    staff_entity_set: str = "systemusers"
    token_path: str = "/_layout/tokenhtml"
    request_token: str | None = None

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "PortalDataSourceConfig":
        """Summary: Build portal settings from the widget's camelCase JSON shape.

        Importance: Keeps existing portal configuration documents usable as-is.
        Alternatives: Define a new snake_case configuration format.
        """

        base_url = data.get("baseUrl")
        if not base_url:
            raise ValueError("portalDataSource.baseUrl is required")
        regarding = data.get("regardingObject") or {}
        return PortalDataSourceConfig(
            base_url=str(base_url).rstrip("/"),
            entity_set_name=data.get("entitySetName") or "adx_portalcomments",
            field_mapping=dict(data.get("fieldMapping") or {}),
            regarding_object=RegardingObjectConfig(
                entity_name=regarding.get("entityName") or "",
                entity_set_name=regarding.get("entitySetName") or "",
                navigation_property=regarding.get("navigationProperty") or "",
            ),
            operations=OperationsConfig.from_dict(data.get("operations")),
            contact_entity_set=data.get("contactEntitySetName") or "contacts",
            staff_entity_set=data.get("staffEntitySetName") or "systemusers",
            token_path=data.get("tokenPath") or "/_layout/tokenhtml",
            request_token=data.get("requestToken") or None,
        )


@dataclass(frozen=True)
class InboxConfig:
    """Summary: Holds configuration for data sources and read-state persistence.

    Importance: Every component derives settings from a single immutable source of truth.
    Alternatives: Pass loose keyword arguments to each component.
    """

    publisher_prefix: str = DEFAULT_PREFIX
    local_data_source: str | None = None
    portal_data_source: PortalDataSourceConfig | None = None
    origin: str = "http://localhost"
    use_portal_api: bool = False
    local_delay_seconds: float = 4.0
    state_store_path: str = "portal_inbox_state.db"

    def __post_init__(self) -> None:
        if not self.local_data_source and self.portal_data_source is None:
            raise ValueError(
                "Either local_data_source or portal_data_source is required in configuration"
            )
        if not self.publisher_prefix:
            raise ValueError("publisher_prefix must not be empty")
        if self.local_delay_seconds < 0:
            raise ValueError("local_delay_seconds must not be negative")

    def field_name(self, key: str) -> str:
        """Summary: Resolve a logical field key to its Dataverse column name.

        Importance: Custom columns carry the publisher prefix unless explicitly mapped.
        Alternatives: Hardcode column names such as msfed_hasread.
        """

        mapping = self.portal_data_source.field_mapping if self.portal_data_source else {}
        return mapping.get(key) or f"{self.publisher_prefix}_{key}"

    def regarding_object(self) -> RegardingObjectConfig:
        configured = (
            self.portal_data_source.regarding_object
            if self.portal_data_source
            else RegardingObjectConfig()
        )
        return configured.resolve(self.publisher_prefix)

    @staticmethod
    def from_dict(data: Mapping[str, Any], **overrides: Any) -> "InboxConfig":
        """Summary: Build configuration from a nested widget configuration document.

        Importance: Accepts the same JSON shape that portal pages pass to the widget.
        Alternatives: Only support flat environment variables.
        """

        portal = data.get("portalDataSource")
        values: dict[str, Any] = {
            "publisher_prefix": (data.get("publisher") or {}).get("prefix") or DEFAULT_PREFIX,
            "local_data_source": data.get("localDataSource") or None,
            "portal_data_source": PortalDataSourceConfig.from_dict(portal) if portal else None,
        }
        for key, config_key in (
            ("origin", "origin"),
            ("use_portal_api", "usePortalApi"),
            ("local_delay_seconds", "localDelaySeconds"),
            ("state_store_path", "stateStorePath"),
        ):
            if config_key in data:
                values[key] = data[config_key]
        values.update(overrides)
        return InboxConfig(**values)

    @staticmethod
    def from_env() -> "InboxConfig":
        """Summary: Build configuration from defaults, .env, and environment.

        Importance: Keeps all variables defined in config defaults while allowing overrides.
        Alternatives: Parse only environment variables without a defaults file.
        """

        defaults = load_defaults(Path("config") / "defaults.json")
        load_dotenv(Path(".env"))
        document: dict[str, Any] = {}
        config_file = os.getenv("PORTALINBOX_CONFIG_FILE", defaults.get("config_file", ""))
        if config_file:
            document = json.loads(Path(config_file).read_text(encoding="utf-8"))
        local_source = os.getenv("PORTALINBOX_LOCAL_DATA_SOURCE", defaults["local_data_source"])
        return InboxConfig.from_dict(
            document,
            publisher_prefix=os.getenv(
                "PORTALINBOX_PUBLISHER_PREFIX",
                (document.get("publisher") or {}).get("prefix") or defaults["publisher_prefix"],
            ),
            local_data_source=document.get("localDataSource") or local_source or None,
            origin=os.getenv("PORTALINBOX_ORIGIN", defaults["origin"]),
            use_portal_api=_parse_bool(
                os.getenv("PORTALINBOX_USE_PORTAL_API", defaults["use_portal_api"])
            ),
            local_delay_seconds=float(
                os.getenv("PORTALINBOX_LOCAL_DELAY_SECONDS", defaults["local_delay_seconds"])
            ),
            state_store_path=os.getenv(
                "PORTALINBOX_STATE_STORE_PATH", defaults["state_store_path"]
            ),
        )


def _parse_bool(value: str | bool) -> bool:
    if isinstance(value, bool):
        return value
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_defaults(path: Path) -> dict[str, str]:
    """Summary: Load configuration defaults from JSON.

    Importance: Ensures all variables exist in a single config file.
    Alternatives: Inline defaults in the InboxConfig initializer.
    """

    if not path.exists():
        raise FileNotFoundError(f"Defaults file not found: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def load_dotenv(path: Path) -> None:
    """Summary: Load key-value pairs from a .env file into the environment.

    Importance: Keeps secrets out of code while supporting local workflows.
    Alternatives: Use python-dotenv or OS-specific secret stores.
    """

    if not path.exists():
        return
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())
