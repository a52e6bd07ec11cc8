"""Tests for the source registry."""

import pytest
from arazzo_builder.sources.registry import get_source, list_operations, list_sources, register_source
from arazzo_builder.workflow.engine import new_editor_state
from arazzo_builder.workflow.errors import DuplicateIdError, NotFoundError


PETSTORE = {
    "openapi": "3.0.0",
    "paths": {
        "/pets": {
            "get": {"operationId": "listPets", "summary": "List pets"},
            "post": {"operationId": "createPet"},
            "parameters": [],
        },
        "/pets/{id}": {
            "delete": {"summary": "no operation id"},
        },
    },
}


def test_register_and_get_source():
    """Test a registered source is stored and described in the document."""
    state = register_source(new_editor_state(), "petstore", PETSTORE, url="./petstore.yaml").state

    assert list_sources(state) == ["petstore"]
    assert get_source(state, "petstore") is PETSTORE
    description = state.document.source_descriptions[0]
    assert (description.name, description.url, description.type) == ("petstore", "./petstore.yaml", "openapi")


def test_register_duplicate_source():
    state = register_source(new_editor_state(), "petstore", PETSTORE).state
    with pytest.raises(DuplicateIdError, match="Duplicate source id: petstore"):
        register_source(state, "petstore", {})


def test_get_unknown_source():
    with pytest.raises(NotFoundError, match="Source not found: ghost"):
        get_source(new_editor_state(), "ghost")


def test_list_operations():
    """Test only operations with an operationId are listed."""
    assert list_operations(PETSTORE) == [
        {"operationId": "listPets", "method": "GET", "path": "/pets", "summary": "List pets"},
        {"operationId": "createPet", "method": "POST", "path": "/pets", "summary": ""},
    ]
    assert list_operations("not a mapping") == []
