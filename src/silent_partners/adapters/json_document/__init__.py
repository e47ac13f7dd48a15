"""Public interface for the JSON graph document codec."""

from __future__ import annotations

from .schema import (
    DocumentEntity,
    DocumentInvestigationContext,
    DocumentRelationship,
    GraphDocument,
)
from .translator import (
    GraphDocumentError,
    document_from_graph,
    dump_graph,
    dumps_graph,
    graph_from_document,
    load_graph,
    loads_graph,
    parse_document,
)

__all__ = [
    "DocumentEntity",
    "DocumentInvestigationContext",
    "DocumentRelationship",
    "GraphDocument",
    "GraphDocumentError",
    "document_from_graph",
    "dump_graph",
    "dumps_graph",
    "graph_from_document",
    "load_graph",
    "loads_graph",
    "parse_document",
]
