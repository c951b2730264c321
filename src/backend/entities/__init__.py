"""
Entities package.

Each subdirectory represents one pipeline component:
- command_orchestrator/: classifies utterances and drives the pipeline
- query_interpreter/: turns a request into a StructuredQuery via the LLM
- query_validator/: checks a StructuredQuery before execution
- query_executor/: runs a validated StructuredQuery against the database
- user_store/: fixed statements (table setup, statistics, probe)
- workflow/: dependency bundle and factory for the pipeline
- shared/: protocols, errors, reply parsing and the database client
"""
