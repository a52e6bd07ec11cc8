""" Pydantic models for the editable Arazzo document. """

from typing import List, Optional, Dict, Any, Literal, Union
from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ArazzoModel(BaseModel):
    # camelCase aliases on the wire, snake_case in code; x- extensions survive
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class ReusableReference(BaseModel):
    """Pointer into ``components`` used in place of an inline parameter or action."""
    model_config = ConfigDict(extra="forbid")

    reference: str
    value: Optional[Any] = None


class Criterion(ArazzoModel):
    condition: str
    context: Optional[str] = None
    type: Optional[Any] = None


class BranchAction(ArazzoModel):
    name: str
    type: Literal["goto", "end", "retry"]
    step_id: Optional[str] = Field(None, alias="stepId")
    workflow_id: Optional[str] = Field(None, alias="workflowId")
    criteria: Optional[List[Criterion]] = None
    retry_after: Optional[float] = Field(None, alias="retryAfter")
    retry_limit: Optional[int] = Field(None, alias="retryLimit")


class Parameter(ArazzoModel):
    name: str
    location: Optional[str] = Field(None, alias="in")  # query, header, path, cookie
    value: Any = None


class RequestBody(ArazzoModel):
    content_type: Optional[str] = Field(None, alias="contentType")
    payload: Any = None


ActionEntry = Union[ReusableReference, BranchAction]
ParameterEntry = Union[ReusableReference, Parameter]


class Step(ArazzoModel):
    step_id: str = Field(alias="stepId")
    description: Optional[str] = None
    operation_id: Optional[str] = Field(None, alias="operationId")
    operation_path: Optional[str] = Field(None, alias="operationPath")
    workflow_id: Optional[str] = Field(None, alias="workflowId")
    parameters: Optional[List[ParameterEntry]] = None
    request_body: Optional[RequestBody] = Field(None, alias="requestBody")
    success_criteria: Optional[List[Criterion]] = Field(None, alias="successCriteria")
    outputs: Optional[Dict[str, str]] = None
    on_success: Optional[List[ActionEntry]] = Field(None, alias="onSuccess")
    on_failure: Optional[List[ActionEntry]] = Field(None, alias="onFailure")


class WorkflowInputs(ArazzoModel):
    type: str = "object"
    required: Optional[List[str]] = None
    properties: Optional[Dict[str, Dict[str, Any]]] = None


class Workflow(ArazzoModel):
    workflow_id: str = Field(alias="workflowId")
    summary: Optional[str] = None
    description: Optional[str] = None
    inputs: Optional[WorkflowInputs] = None
    steps: List[Step] = Field(default_factory=list)
    outputs: Optional[Dict[str, str]] = None
    parameters: Optional[List[ParameterEntry]] = None

    def get_step(self, step_id: str) -> Optional[Step]:
        for step in self.steps:
            if step.step_id == step_id:
                return step
        return None


class Info(ArazzoModel):
    title: str
    version: str
    summary: Optional[str] = None
    description: Optional[str] = None


class SourceDescription(ArazzoModel):
    name: str
    url: str
    type: Literal["openapi", "arazzo"] = "openapi"
    description: Optional[str] = None


class Components(ArazzoModel):
    inputs: Optional[Dict[str, WorkflowInputs]] = None
    schemas: Optional[Dict[str, Dict[str, Any]]] = None
    parameters: Optional[Dict[str, Parameter]] = None
    success_actions: Optional[Dict[str, BranchAction]] = Field(None, alias="successActions")
    failure_actions: Optional[Dict[str, BranchAction]] = Field(None, alias="failureActions")


class Document(ArazzoModel):
    arazzo: str
    info: Info
    source_descriptions: List[SourceDescription] = Field(default_factory=list, alias="sourceDescriptions")
    workflows: List[Workflow] = Field(default_factory=list)
    components: Optional[Components] = None


def model_to_dict(model: BaseModel) -> Dict[str, Any]:
    """Wire form of a model: camelCase keys, absent fields omitted."""
    return model.model_dump(by_alias=True, exclude_none=True)


def merge_fields(model: BaseModel, updates: Dict[str, Any]) -> BaseModel:
    """Shallow-merge ``updates`` (alias or field names) into a re-validated copy of ``model``."""
    cls = type(model)
    merged = model.model_dump(by_alias=True)
    for key, value in updates.items():
        field = cls.model_fields.get(key)
        merged[field.alias or key if field else key] = value
    return cls.model_validate(merged)


def validate_document(raw: Dict[str, Any]) -> Document:
    """Validate a raw mapping (parsed YAML or JSON) against Document."""
    try:
        return Document.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"YAML validation error: {e}")
