"""Pydantic response models for the REST API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Error envelope returned by every non-2xx response."""

    error: str
    detail: str


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    timestamp: str


class IssueModel(BaseModel):
    kind: str
    name: str
    namespace: str | None = None
    problem: str
    solution: str | None = None
    severity: Literal["critical", "warning", "info"]


class SummaryModel(BaseModel):
    total: int
    critical: int
    warning: int
    info: int


class AnalysisResponse(BaseModel):
    timestamp: str
    cluster: str
    issues: list[IssueModel]
    summary: SummaryModel
    commands: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class ClusterModel(BaseModel):
    name: str
    server: str | None = None
    context: str


class StatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    anonymous_mode: bool = Field(alias="anonymousMode")
    backend: dict[str, str]
    cluster: ClusterModel
    k8sgpt_version: str = Field(alias="k8sgptVersion")
    version: str
    timestamp: str


class FiltersResponse(BaseModel):
    filters: list[str]


class NamespacesResponse(BaseModel):
    namespaces: list[str]
