"""Wire schemas — camelCase JSON shape of extraction results."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from gradlesentinel.engines.dependency_extractor.models import PackageFile


class _WireModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ManagerDataSchema(_WireModel):
    package_file: str
    file_replace_position: int | None = None


class DependencySchema(_WireModel):
    dep_name: str
    package_name: str | None = None
    dep_type: str
    current_value: str | None = None
    group_name: str | None = None
    commit_message_topic: str | None = None
    registry_urls: list[str]
    skip_reason: str | None = None
    file_replace_position: int | None = None
    manager_data: ManagerDataSchema


class PackageFileSchema(_WireModel):
    package_file: str
    datasource: str | None = None
    deps: list[DependencySchema]


def to_wire(result: list[PackageFile] | None) -> list[dict] | None:
    """Dump extraction results as plain dicts, omitting unset fields."""
    if result is None:
        return None
    return [
        PackageFileSchema.model_validate(record).model_dump(by_alias=True, exclude_none=True)
        for record in result
    ]
