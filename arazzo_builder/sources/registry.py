""" Named external API descriptions attached to the document. """
from typing import Any, Dict, List

from arazzo_builder.workflow.errors import DuplicateIdError, NotFoundError
from arazzo_builder.workflow.schema import SourceDescription
from arazzo_builder.workflow.selection import EditorState, EditResult

_HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


def register_source(state: EditorState, name: str, content: Any, url: str = "uploaded",
                    source_type: str = "openapi") -> EditResult:
    """ Store parsed source content and list it in sourceDescriptions. """
    if name in state.sources or any(s.name == name for s in state.document.source_descriptions):
        raise DuplicateIdError("source", name)
    document = state.document.model_copy(deep=True)
    document.source_descriptions.append(SourceDescription(name=name, url=url, type=source_type))
    sources = {**state.sources, name: content}
    return EditResult(state.evolve(document=document, sources=sources))


def get_source(state: EditorState, name: str) -> Any:
    if name not in state.sources:
        raise NotFoundError("source", name)
    return state.sources[name]


def list_sources(state: EditorState) -> List[str]:
    return list(state.sources)


def list_operations(content: Any) -> List[Dict[str, str]]:
    """
    operationIds declared by an OpenAPI mapping, in document order.
    Anything that is not a mapping with ``paths`` yields nothing.
    """
    if not isinstance(content, dict):
        return []
    operations = []
    for path, item in (content.get("paths") or {}).items():
        if not isinstance(item, dict):
            continue
        for method in _HTTP_METHODS:
            op = item.get(method)
            if isinstance(op, dict) and op.get("operationId"):
                operations.append({
                    "operationId": op["operationId"],
                    "method": method.upper(),
                    "path": path,
                    "summary": op.get("summary", ""),
                })
    return operations
