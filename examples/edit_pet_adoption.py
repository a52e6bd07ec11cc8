"""Example: load an Arazzo workflow, edit it through a session and print the result.
Demonstrates step insertion on an edge, renaming with reference rewriting and undo.
"""
from arazzo_builder.observability.logging import configure_logging
from arazzo_builder.session import EditingSession
from arazzo_builder.sources.registry import list_operations
from arazzo_builder.workflow.commands import (
    AddSource,
    DeleteStep,
    InsertStepOnEdge,
    LoadDocument,
    RenameStep,
    UpdateStep,
)
from arazzo_builder.workflow.compiler import dump_yaml, load_yaml
from arazzo_builder.workflow.suggestions import expression_suggestions

PETSTORE = {
    "openapi": "3.0.0",
    "paths": {
        "/pets": {"get": {"operationId": "findPetsByStatus", "summary": "Find pets"}},
        "/pets/{petId}/reservations": {"post": {"operationId": "reservePet"}},
        "/pets/{petId}/health": {"get": {"operationId": "checkHealth", "summary": "Health record"}},
    },
}


def main():
    configure_logging()

    with open('examples/specs/pet_adoption.yaml') as f:
        document = load_yaml(f.read())

    session = EditingSession()
    session.subscribe(lambda result: [print('warning:', w) for w in result.warnings])

    session.dispatch(LoadDocument(document))
    session.dispatch(AddSource('health-api', PETSTORE))
    print('Operations:', [op['operationId'] for op in list_operations(PETSTORE)])

    # Put a health check between finding and reserving the pet
    session.dispatch(InsertStepOnEdge({
        'stepId': 'check-health',
        'operationId': 'checkHealth',
        'parameters': [{'name': 'petId', 'in': 'path', 'value': '$steps.find-pets.outputs.petId'}],
    }, 'find-pets', 'reserve-pet'))

    # Renaming rewrites gotos and $steps expressions across the workflow
    session.dispatch(RenameStep('find-pets', 'search'))
    session.dispatch(UpdateStep('reserve-pet', {'description': 'Reserve the chosen pet'}))

    workflow = session.state.document.workflows[0]
    print('Suggestions for reserve-pet:')
    for suggestion in expression_suggestions(workflow, current_step_id='reserve-pet'):
        print(' ', suggestion.expression)

    # Deleting a step referenced by expressions reports dangling references
    session.dispatch(DeleteStep('search'))
    session.undo()

    print('\n--- DOCUMENT ---')
    print(dump_yaml(session.state.document))


if __name__ == '__main__':
    main()
