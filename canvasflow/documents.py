# canvasflow/documents.py
"""Saved/exported canvas workflows.

Nodes keep their canvas shape: the layout position rides along untouched and
everything else is read from the "data" block. Other presentation fields are
dropped. The run endpoint accepts the same document.
"""
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .models import Edge, Node, VariableValue


class WorkflowDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)
    variables: Dict[str, VariableValue] = Field(default_factory=dict)


def parse_workflow(data: Dict[str, Any]) -> WorkflowDocument:
    return WorkflowDocument.model_validate(data)


def load_workflow(path: Union[str, Path]) -> WorkflowDocument:
    with open(path, encoding="utf-8") as fh:
        return parse_workflow(json.load(fh))
